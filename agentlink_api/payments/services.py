import logging

from django.conf import settings

from .exceptions import PaymentProcessorError, ProcessorUnavailable
from .providers import get_payment_provider

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Provider adapter. This class should NOT create or update Job/Transaction records.
    It only calls the configured payment provider and turns error results into exceptions.
    """
    def __init__(self, provider_name=None, provider=None):
        self.default_provider_name = provider_name or getattr(settings, 'PAYMENT_PROVIDER', None)
        self._provider = provider

    @property
    def provider(self):
        if self._provider is None:
            if not self.default_provider_name:
                raise ValueError("provider_name is required (no default configured).")
            self._provider = get_payment_provider(self.default_provider_name)
        return self._provider

    def _unwrap(self, action, result):
        if result.get('status') == 'success':
            return result
        message = result.get('message') or f'{action} failed'
        logger.error(f"Payment provider {action} failed: {result.get('error', message)}")
        if result.get('retryable'):
            raise ProcessorUnavailable(message)
        raise PaymentProcessorError(message)

    def create_hold(self, *, amount, payer, idempotency_key, **kwargs):
        result = self.provider.create_hold(amount, payer, idempotency_key, **kwargs)
        return self._unwrap('create_hold', result)

    def retrieve_hold(self, *, reference):
        return self._unwrap('retrieve_hold', self.provider.retrieve_hold(reference))

    def capture(self, *, reference, idempotency_key):
        return self._unwrap('capture', self.provider.capture(reference, idempotency_key))

    def void_or_refund(self, *, reference):
        return self._unwrap('void_or_refund', self.provider.void_or_refund(reference))
