from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.checks import Error, Warning, register

STRIPE_KEY_PREFIXES = {
    'test': 'sk_test_',
    'live': 'sk_live_',
}


@register()
def check_stripe_mode(app_configs, **kwargs):
    """Stripe key and STRIPE_MODE must agree, otherwise stored intent ids break across modes."""
    if getattr(settings, 'PAYMENT_PROVIDER', None) != 'stripe':
        return []

    key = getattr(settings, 'STRIPE_SECRET_KEY', '')
    mode = getattr(settings, 'STRIPE_MODE', 'test')

    if not key:
        return [Warning(
            "STRIPE_SECRET_KEY is not set; escrow holds will fail.",
            id='payments.W001',
        )]

    expected = STRIPE_KEY_PREFIXES.get(mode)
    if expected is None:
        return [Error(
            f"STRIPE_MODE must be one of {sorted(STRIPE_KEY_PREFIXES)}, got {mode!r}.",
            id='payments.E001',
        )]

    if not key.startswith(expected):
        return [Error(
            f"STRIPE_SECRET_KEY does not match STRIPE_MODE={mode!r}.",
            hint=f"Use a key starting with {expected} or change STRIPE_MODE.",
            id='payments.E002',
        )]
    return []


@register()
def check_platform_fee_rate(app_configs, **kwargs):
    try:
        rate = Decimal(str(getattr(settings, 'PLATFORM_FEE_RATE', '')))
    except InvalidOperation:
        rate = None

    if rate is None or not (Decimal('0') < rate < Decimal('1')):
        return [Error(
            "PLATFORM_FEE_RATE must be a decimal strictly between 0 and 1.",
            id='payments.E003',
        )]
    return []
