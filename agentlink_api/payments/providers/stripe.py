import stripe
import logging
from .base import BasePaymentProvider
from django.conf import settings

logger = logging.getLogger(__name__)

# Intent states that can still be cancelled without moving money.
VOIDABLE_STATUSES = frozenset({
    'requires_payment_method',
    'requires_confirmation',
    'requires_action',
    'requires_capture',
    'processing',
})


def to_cents(amount):
    return int((amount * 100).to_integral_value())


class StripeProvider(BasePaymentProvider):
    """
    Stripe payment provider implementation for job escrow.
    Holds are manual-capture PaymentIntents.
    """

    name = 'stripe'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        stripe.api_key = settings.STRIPE_SECRET_KEY
        self.publishable_key = settings.STRIPE_PUBLISHABLE_KEY
        self.currency = getattr(settings, 'STRIPE_CURRENCY', 'usd')

    def _error(self, action, exc):
        retryable = isinstance(exc, (stripe.APIConnectionError, stripe.RateLimitError, stripe.APIError))
        logger.error(f"Stripe API error in {action}: {str(exc)} (retryable={retryable})")
        return {
            'status': 'error',
            'message': f'Stripe {action} failed',
            'error': str(exc),
            'retryable': retryable,
        }

    def create_hold(self, amount, payer, idempotency_key, **kwargs):
        """
        Create a manual-capture Payment Intent for the job fee.

        The idempotency key makes a retried request return the intent that was
        already created instead of opening a second hold.
        """
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_cents(amount),
                currency=self.currency,
                capture_method='manual',
                automatic_payment_methods={
                    'enabled': True,
                },
                metadata={
                    'payer_id': str(payer.id),
                    'job_id': str(kwargs.get('job_id', '')),
                    'platform_fee': str(kwargs.get('platform_fee', '')),
                    'payout_amount': str(kwargs.get('payout_amount', '')),
                },
                description=kwargs.get('description', 'Job escrow hold'),
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            return self._error('create_hold', e)

        logger.info(f"Stripe hold {intent.id} created for user {payer.id}, amount: {amount}, status: {intent.status}")

        return {
            'status': 'success',
            'reference': intent.id,
            'intent_status': intent.status,
            'client_secret': intent.client_secret,
            'provider': self.name,
        }

    def retrieve_hold(self, reference):
        try:
            intent = stripe.PaymentIntent.retrieve(reference)
        except stripe.StripeError as e:
            return self._error('retrieve_hold', e)

        return {
            'status': 'success',
            'reference': intent.id,
            'intent_status': intent.status,
            'client_secret': intent.client_secret,
            'provider': self.name,
        }

    def capture(self, reference, idempotency_key):
        try:
            intent = stripe.PaymentIntent.retrieve(reference)
            if intent.status == 'requires_capture':
                intent = stripe.PaymentIntent.capture(reference, idempotency_key=idempotency_key)
        except stripe.StripeError as e:
            return self._error('capture', e)

        logger.info(f"Stripe capture for {reference}: status {intent.status}")

        return {
            'status': 'success',
            'reference': intent.id,
            'intent_status': intent.status,
            'settled': intent.status == 'succeeded',
            'provider': self.name,
        }

    def void_or_refund(self, reference):
        try:
            intent = stripe.PaymentIntent.retrieve(reference)

            if intent.status == 'canceled':
                return {'status': 'success', 'action': 'voided', 'reference': intent.id}

            if intent.status in VOIDABLE_STATUSES:
                stripe.PaymentIntent.cancel(reference, cancellation_reason='abandoned')
                logger.info(f"Stripe hold {reference} voided")
                return {'status': 'success', 'action': 'voided', 'reference': reference}

            refund = stripe.Refund.create(
                payment_intent=reference,
                metadata={'escrow_refund': 'true', 'original_intent': reference},
                idempotency_key=f'refund-{reference}',
            )
        except stripe.StripeError as e:
            return self._error('void_or_refund', e)

        logger.info(f"Stripe refund created: {refund.id} for intent {reference}")

        return {
            'status': 'success',
            'action': 'refunded',
            'refund_id': refund.id,
            'reference': reference,
        }
