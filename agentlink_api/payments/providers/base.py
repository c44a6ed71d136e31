from abc import ABC, abstractmethod

HOLD_CAPTURABLE_STATUSES = frozenset({'requires_capture', 'succeeded', 'processing'})


class BasePaymentProvider(ABC):
    """
    Abstract base class for all payment providers.
    Defines the manual-capture hold interface escrow settlement relies on.

    Every method returns a dict with ``status`` set to ``success`` or ``error``.
    Error dicts carry ``message``, ``error`` and ``retryable``.
    """

    name = None

    def __init__(self, **kwargs):
        """Initialize the payment provider with configuration."""
        self.config = kwargs

    @abstractmethod
    def create_hold(self, amount, payer, idempotency_key, **kwargs):
        """
        Reserve funds from the payer without capturing them.

        Args:
            amount: Amount to hold (Decimal, two places)
            payer: User object whose funds are held
            idempotency_key: Key that makes retries return the same hold
            **kwargs: Additional parameters specific to the provider

        Returns:
            Dict with ``reference``, ``intent_status`` and ``client_secret``
        """
        pass

    @abstractmethod
    def retrieve_hold(self, reference):
        """
        Look up a hold.

        Args:
            reference: Provider reference returned by create_hold

        Returns:
            Dict with ``intent_status`` and ``client_secret``
        """
        pass

    @abstractmethod
    def capture(self, reference, idempotency_key):
        """
        Finalize a hold into a real charge.

        Returns:
            Dict with ``settled`` (bool)
        """
        pass

    @abstractmethod
    def void_or_refund(self, reference):
        """
        Release a hold. Uncaptured holds are voided, captured ones refunded.

        Returns:
            Dict with ``action`` set to ``voided`` or ``refunded``
        """
        pass
