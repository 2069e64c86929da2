from django.contrib import admin

from .models import Gym, GymMembership, ServiceOrder, TrainerBooking


@admin.register(Gym)
class GymAdmin(admin.ModelAdmin):
    list_display = ("gym_id", "name", "member_count", "created_at")
    search_fields = ("gym_id", "name", "owner_id")


@admin.register(ServiceOrder)
class ServiceOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "service_type", "user_id", "trainer_id", "total_amount", "status", "created_at")
    search_fields = ("invoice_id", "transaction_id", "user_id", "trainer_id")
    list_filter = ("status", "package_type", "urgent_delivery", "created_at")
    readonly_fields = ("invoice_id", "transaction_id", "created_at", "updated_at")


@admin.register(TrainerBooking)
class TrainerBookingAdmin(admin.ModelAdmin):
    list_display = ("id", "service_type", "user_id", "trainer_id", "scheduled_date", "total_amount", "status")
    search_fields = ("invoice_id", "transaction_id", "user_id", "trainer_id")
    list_filter = ("status", "booking_type", "scheduled_date")
    readonly_fields = ("invoice_id", "transaction_id", "created_at", "updated_at")


@admin.register(GymMembership)
class GymMembershipAdmin(admin.ModelAdmin):
    list_display = ("id", "gym_id", "user_id", "amount_paid", "start_date", "end_date", "status")
    search_fields = ("invoice_id", "transaction_id", "user_id", "gym_id")
    list_filter = ("status", "start_date")
    readonly_fields = ("invoice_id", "transaction_id", "created_at", "updated_at")
