from decimal import Decimal

from .settings import *  # noqa: F401,F403

SECRET_KEY = 'test-only-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'TEST': {'NAME': BASE_DIR / 'test_db.sqlite3'},
        'OPTIONS': {'timeout': 20},
    },
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'

PAYMENT_PROVIDER = 'stripe'
STRIPE_SECRET_KEY = 'sk_test_dummy'
STRIPE_MODE = 'test'
PLATFORM_FEE_RATE = Decimal('0.20')
GEOFENCE_RADIUS_FEET = 200.0
