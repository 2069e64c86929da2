from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

UDDOKTAPAY_API_KEY = 'test-gateway-key'
UDDOKTAPAY_BASE_URL = 'https://gateway.test'
PAYMENTS_APP_URL = 'https://app.test'
