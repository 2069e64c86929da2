from django.test import TestCase

from .models import Notification
from .services import create_notifications


class CreateNotificationsTests(TestCase):
    def test_creates_one_row_per_recipient(self):
        created = create_notifications([
            {"user_id": "u1", "type": "booking_confirmed", "title": "Booking Confirmed",
             "message": "Your training session has been confirmed!", "related_id": "b1"},
            {"user_id": "t1", "type": "new_booking", "title": "New Booking",
             "message": "You have received a new booking!", "related_id": "b1"},
        ])

        self.assertEqual(len(created), 2)
        self.assertEqual(Notification.objects.filter(related_id="b1", is_read=False).count(), 2)

    def test_entry_without_recipient_is_skipped(self):
        with self.assertLogs("notifications.services", level="WARNING"):
            created = create_notifications([
                {"user_id": "", "type": "new_booking", "title": "New Booking", "message": "..."},
                {"user_id": "u1", "type": "booking_confirmed", "title": "Booking Confirmed", "message": "..."},
            ])

        self.assertEqual([n.user_id for n in created], ["u1"])
        self.assertEqual(Notification.objects.get().related_id, "")

    def test_nothing_to_create(self):
        self.assertEqual(create_notifications([]), [])
        self.assertFalse(Notification.objects.exists())
