import uuid

from django.db import models


class Gym(models.Model):
    gym_id = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=128, blank=True, default="")
    owner_id = models.CharField(max_length=64, blank=True, default="")
    member_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name or self.gym_id


class PaidOrder(models.Model):
    """Fields shared by every record created from a verified payment.

    ``invoice_id`` is the gateway invoice the record was fulfilled from. It is
    unique so a webhook delivered twice cannot create a second record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64, db_index=True)
    payment_status = models.CharField(max_length=16, default="completed")
    payment_method = models.CharField(max_length=32, default="uddoktapay")
    transaction_id = models.CharField(max_length=128, blank=True, default="")
    invoice_id = models.CharField(max_length=128, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ("-created_at",)


class ServiceOrder(PaidOrder):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("accepted", "Accepted"),
        ("in_progress", "In progress"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
    ]
    trainer_id = models.CharField(max_length=64, db_index=True)
    service_type = models.CharField(max_length=200, default="Training Service")
    description = models.TextField(blank=True, default="")
    package_type = models.CharField(max_length=32, default="basic")
    session_count = models.PositiveIntegerField(default=1)
    # minutes; derived from delivery days for the scheduling views
    session_duration = models.PositiveIntegerField(default=0)
    delivery_days = models.PositiveIntegerField(default=0)
    urgent_delivery = models.BooleanField(default=False)
    booking_type = models.CharField(max_length=16, default="online")
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="pending", db_index=True)
    notes = models.TextField(blank=True, default="")

    def __str__(self):
        return f"{self.service_type} for {self.user_id} ({self.status})"


class TrainerBooking(PaidOrder):
    STATUS_CHOICES = [
        ("confirmed", "Confirmed"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("no_show", "No show"),
    ]
    trainer_id = models.CharField(max_length=64, db_index=True)
    service_type = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    scheduled_date = models.DateField(null=True, blank=True)
    scheduled_time = models.TimeField(null=True, blank=True)
    booking_type = models.CharField(max_length=16, default="online")
    session_count = models.PositiveIntegerField(default=1)
    package_type = models.CharField(max_length=32, default="basic")
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="confirmed", db_index=True)

    def __str__(self):
        return f"{self.service_type} on {self.scheduled_date or '-'} ({self.status})"


class GymMembership(PaidOrder):
    STATUS_CHOICES = [
        ("active", "Active"),
        ("expired", "Expired"),
        ("cancelled", "Cancelled"),
    ]
    gym_id = models.CharField(max_length=64, db_index=True)
    plan_id = models.CharField(max_length=64, blank=True, default="")
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="active", db_index=True)

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.gym_id} membership {self.start_date} to {self.end_date}"
