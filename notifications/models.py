from django.db import models


class Notification(models.Model):
    user_id = models.CharField(max_length=64, db_index=True)
    type = models.CharField(max_length=48)
    title = models.CharField(max_length=200)
    message = models.TextField()
    related_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.type} -> {self.user_id}"
