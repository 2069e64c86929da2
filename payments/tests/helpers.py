import json


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        self.text = text if text is not None else json.dumps(data)

    def json(self):
        if self._data is None:
            raise ValueError("No JSON object could be decoded")
        return self._data


def service_order_metadata(user_id="u1", **overrides):
    data = {
        "trainer_id": "t1",
        "service_title": "12-week Strength Plan",
        "package_type": "standard",
        "quantity": 1,
        "delivery_days": 7,
        "requirements": "Beginner, 3 days a week",
        "additional_notes": "",
        "urgent_delivery": False,
    }
    data.update(overrides)
    return {"user_id": user_id, "service_order_data": json.dumps(data)}


def gym_membership_metadata(user_id="u1", **overrides):
    data = {"gym_id": "g1", "plan_id": "p-quarterly", "duration_days": 90, "gym_name": "Iron Temple"}
    data.update(overrides)
    return {"user_id": user_id, "gym_membership_data": json.dumps(data), "origin": "https://app.test"}


def booking_metadata(user_id="u1", **overrides):
    data = {
        "trainer_id": "t2",
        "trainer_name": "Rafi",
        "scheduled_date": "2024-05-10",
        "scheduled_time": "07:30",
        "mode": "in_person",
        "session_count": 2,
    }
    data.update(overrides)
    return {"user_id": user_id, "booking_data": json.dumps(data)}


def gateway_payload(status="COMPLETED", amount="1500", metadata=None, invoice_id="inv_123", **extra):
    data = {
        "full_name": "Nadia Rahman",
        "email": "nadia@example.com",
        "amount": amount,
        "fee": "0.00",
        "charged_amount": amount,
        "invoice_id": invoice_id,
        "metadata": metadata if metadata is not None else {},
        "payment_method": "bkash",
        "sender_number": "01700000000",
        "transaction_id": "TX8H2K1",
        "session_id": "s1",
        "date": "2024-01-01 10:00:00",
        "status": status,
    }
    data.update(extra)
    return data
