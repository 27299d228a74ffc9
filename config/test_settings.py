# config/test_settings.py

from .settings import *

# =============================================
# TEST-SPECIFIC SETTINGS
# =============================================

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# Remove WhiteNoise middleware
MIDDLEWARE = [m for m in MIDDLEWARE if 'whitenoise' not in m.lower()]

# Faster password hashing
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Never reach a real document store from tests
CATALOG_STORE = {
    'BACKEND': 'catalog.store.MemoryDocumentStore',
    'OPTIONS': {},
}
CATALOG_REFRESH_ON_STARTUP = False

DEBUG = False

# caplog listens on the root logger
LOGGING['loggers']['catalog']['propagate'] = True
