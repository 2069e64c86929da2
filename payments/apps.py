from django.apps import AppConfig
from django.conf import settings
from django.core import checks


def check_gateway_settings(app_configs, **kwargs):
    errors = []
    if not getattr(settings, "UDDOKTAPAY_API_KEY", ""):
        errors.append(checks.Error(
            "UDDOKTAPAY_API_KEY is not set; payments cannot be verified.",
            hint="Set UDDOKTAPAY_API_KEY in the environment or .env file.",
            id="payments.E001",
        ))
    try:
        timeout = float(getattr(settings, "UDDOKTAPAY_TIMEOUT", 8))
    except (TypeError, ValueError):
        timeout = 0
    if timeout <= 0:
        errors.append(checks.Error("UDDOKTAPAY_TIMEOUT must be a positive number of seconds.", id="payments.E002"))
    return errors


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"

    def ready(self):
        checks.register(check_gateway_settings)
        # connects the setting_changed hook that drops the cached client
        from .integrations import uddoktapay  # noqa: F401
