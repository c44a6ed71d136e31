from rest_framework import status
from rest_framework.exceptions import APIException


class ProcessorUnavailable(APIException):
    """Transient failure talking to the payment processor. Retry with backoff."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Payment processor is temporarily unavailable. Please retry.'
    default_code = 'processor_unavailable'


class PaymentProcessorError(APIException):
    """The processor gave a definitive rejection."""
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = 'Payment processor rejected the request.'
    default_code = 'processor_error'
