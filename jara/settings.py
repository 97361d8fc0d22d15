import os
from pathlib import Path

from django.utils.translation import gettext_lazy as _
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


def _get_env(*keys, default=None):
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_bool(*keys, default=False):
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


def _get_float(*keys, default=0.0):
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


SECRET_KEY = _get_env("DJANGO_SECRET_KEY", default="django-insecure-jara-dev-key")
DEBUG = _get_bool("DJANGO_DEBUG", default=True)
ALLOWED_HOSTS = (_get_env("DJANGO_ALLOWED_HOSTS", default="localhost,127.0.0.1,testserver") or "").split(",")

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'colorfield',
    'nested_admin',
    'shop',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.locale.LocaleMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'shop.middleware.CartMiddleware',
]

ROOT_URLCONF = 'jara.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.template.context_processors.i18n',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'shop.context_processors.cart_count',
            ],
        },
    },
]

WSGI_APPLICATION = 'jara.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': _get_env("DATABASE_PATH", default=str(BASE_DIR / "db.sqlite3")),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LOGIN_URL = 'login'

# --- اللغات (Languages) ---
LANGUAGE_CODE = 'ar'
LANGUAGES = [
    ('ar', _('Arabic')),
    ('en', _('English')),
]
LOCALE_PATHS = [BASE_DIR / 'shop' / 'locale']
TIME_ZONE = 'Asia/Riyadh'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

SESSION_SERIALIZER = 'django.contrib.sessions.serializers.JSONSerializer'

# --- البريد (Email) ---
EMAIL_BACKEND = _get_env("EMAIL_BACKEND", default='django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = _get_env("EMAIL_HOST", default='smtp.gmail.com')
EMAIL_PORT = int(_get_env("EMAIL_PORT", default="587"))
EMAIL_USE_TLS = _get_bool("EMAIL_USE_TLS", default=True)
EMAIL_HOST_USER = _get_env("EMAIL_HOST_USER", default='store@jara.example')
EMAIL_HOST_PASSWORD = _get_env("EMAIL_HOST_PASSWORD", default='')

# --- إعدادات المتجر (Store) ---
STORE_NAME = _get_env("STORE_NAME", default='JARA Fashion Store')
CART_STORAGE_KEY = _get_env("CART_STORAGE_KEY", default='jara-cart')
PAYMENT_MOCK_DELAY = _get_float("PAYMENT_MOCK_DELAY", default=2.0)
BANK_DETAILS = {
    'account_name': STORE_NAME,
    'account_number': _get_env("BANK_ACCOUNT_NUMBER", default='SA1234567890123456789012'),
    'bank_name': _get_env("BANK_NAME", default='Al Rajhi Bank'),
    'swift_code': _get_env("BANK_SWIFT_CODE", default='RJHISARI'),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': _get_env("LOG_LEVEL", default='INFO'),
    },
}
