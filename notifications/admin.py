from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("type", "user_id", "title", "related_id", "is_read", "created_at")
    search_fields = ("user_id", "related_id", "title")
    list_filter = ("type", "is_read", "created_at")
