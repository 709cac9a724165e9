"""
Django settings for the Storekeeper test suite.
"""

SECRET_KEY = 'storekeeper-tests'

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.admin',
    'django.contrib.sessions',
    'django.contrib.messages',
    'storekeeper',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

STOREKEEPER = {
    'CATALOG_BACKEND': 'storekeeper.adapters.static.StaticCatalog',
    'DISCOUNT_BACKEND': 'storekeeper.adapters.static.NoDiscount',
}
