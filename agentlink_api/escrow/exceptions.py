from rest_framework import status
from rest_framework.exceptions import APIException


class PaymentNotReady(APIException):
    """The hold is not in a capturable state yet. The caller should retry later."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Payment is not ready yet. Complete checkout and retry.'
    default_code = 'payment_not_ready'


class InsufficientBalance(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient balance.'
    default_code = 'insufficient_balance'
