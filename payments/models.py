from django.db import models


class Transaction(models.Model):
    ORDER_TYPES = [
        ("service_order", "Service order"),
        ("gym_membership", "Gym membership"),
        ("trainer_booking", "Trainer booking"),
    ]
    order_type = models.CharField(max_length=20, choices=ORDER_TYPES)
    order_id = models.CharField(max_length=64, db_index=True)  # pk of the booking/membership/service order
    invoice_id = models.CharField(max_length=128, unique=True)
    payment_session_id = models.CharField(max_length=128, blank=True, default="")

    user_id = models.CharField(max_length=64, db_index=True)
    trainer_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    gym_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission = models.DecimalField(max_digits=12, decimal_places=2)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=32, default="uddoktapay")
    status = models.CharField(max_length=16, default="completed")
    description = models.CharField(max_length=255, blank=True, default="")
    transaction_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-transaction_date",)

    def __str__(self):
        return f"{self.invoice_id} {self.amount} ({self.order_type})"


class PostCommitAction(models.Model):
    """Side effect queued with an order record and run after it commits.

    Rows start ``pending``; a failed run keeps them pending with the error so
    ``process_post_commit_actions`` can retry until ``max_attempts``.
    """

    LEDGER = "ledger"
    NOTIFY = "notify"
    INCREMENT_MEMBER_COUNT = "increment_member_count"
    KIND_CHOICES = [
        (LEDGER, "Ledger entry"),
        (NOTIFY, "Notifications"),
        (INCREMENT_MEMBER_COUNT, "Increment gym member count"),
    ]

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    STATUS_CHOICES = [(PENDING, "Pending"), (DONE, "Done"), (FAILED, "Failed")]

    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    invoice_id = models.CharField(max_length=128, db_index=True)
    payload = models.JSONField(default=dict)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("created_at",)
        constraints = [
            models.UniqueConstraint(fields=["invoice_id", "kind"], name="uniq_action_per_invoice"),
        ]

    def __str__(self):
        return f"{self.kind} for {self.invoice_id} ({self.status})"
