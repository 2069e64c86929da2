from django.contrib import admin
from .models import PostCommitAction, Transaction

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("invoice_id", "order_type", "amount", "commission", "net_amount", "user_id", "transaction_date")
    search_fields = ("invoice_id", "payment_session_id", "order_id", "user_id", "trainer_id", "gym_id")
    list_filter = ("order_type", "status", "transaction_date")
    readonly_fields = ("amount", "commission", "net_amount", "created_at")


@admin.register(PostCommitAction)
class PostCommitActionAdmin(admin.ModelAdmin):
    list_display = ("invoice_id", "kind", "status", "attempts", "created_at", "processed_at")
    search_fields = ("invoice_id",)
    list_filter = ("kind", "status")
    readonly_fields = ("payload", "last_error", "created_at", "processed_at")
