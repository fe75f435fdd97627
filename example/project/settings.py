"""
Django settings for Priceman example project.

This is a minimal working example that demonstrates how to use django-priceman
in a real Django project. It also serves as the test settings.
"""

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = "example-secret-key-change-in-production"

DEBUG = True

ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django contrib
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.sessions",
    # Third-party
    "rest_framework",
    # Priceman
    "priceman.apps.PricemanConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
]

ROOT_URLCONF = "example.project.urls"

WSGI_APPLICATION = "example.project.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = "pt-br"
TIME_ZONE = "America/Sao_Paulo"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Django REST Framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_THROTTLE_CLASSES": [],
}

# Priceman
PRICEMAN = {
    "MIN_MARGIN_PERCENT": 5,
    "MAX_PERCENTAGE_DISCOUNT": 90,
    "REPORT_RESULTS_LIMIT": 10,
    "REPOSITORY": "priceman.adapters.orm.DjangoProductRepository",
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "loggers": {
        "priceman": {"handlers": ["console"], "level": "WARNING"},
    },
}
