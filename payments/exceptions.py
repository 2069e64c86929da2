from django.core.exceptions import ImproperlyConfigured


class PaymentError(Exception):
    """Base class for everything the verify/fulfil pipeline raises."""

    code = "payment_error"


class ConfigurationError(PaymentError, ImproperlyConfigured):
    code = "configuration_error"


class GatewayError(PaymentError):
    code = "gateway_error"

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class VerificationFailure(PaymentError):
    """The payment could not be verified; nothing was written locally."""


class MissingIdentifier(VerificationFailure):
    code = "missing_identifier"


class UpstreamVerificationError(VerificationFailure, GatewayError):
    code = "upstream_verification_error"


class FulfillmentFailure(PaymentError):
    """The gateway confirmed the payment but no local order could be created."""


class InvalidOrderMetadata(FulfillmentFailure):
    code = "invalid_order_metadata"


class FulfillmentError(FulfillmentFailure):
    code = "fulfillment_error"
