from django.urls import path
from . import views
app_name = "payments"
urlpatterns = [
    path("create", views.create_payment_view, name="create"),
    # gateway webhook_url and the client's manual check both land here
    path("verify", views.verify_payment_view, name="verify"),
]
