from __future__ import annotations

from django.conf import settings
from django.utils.module_loading import import_string


PRICEMAN_DEFAULTS = {
    "MIN_MARGIN_PERCENT": 5,
    "MAX_PERCENTAGE_DISCOUNT": 90,
    "MIN_SELLING_MULTIPLIER": "1.1",
    "REPORT_RESULTS_LIMIT": 10,
    "LOW_STOCK_THRESHOLD": 10,
    "REPOSITORY": "priceman.adapters.orm.DjangoProductRepository",
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
}


def get_priceman_setting(key: str):
    """Retrieve a Priceman setting, falling back to PRICEMAN_DEFAULTS."""
    user_settings = getattr(settings, "PRICEMAN", {})
    value = user_settings.get(key, PRICEMAN_DEFAULTS.get(key))
    if isinstance(value, list) and value and isinstance(value[0], str):
        return [import_string(cls) for cls in value]
    return value


def get_repository():
    """Instantiate the repository configured under PRICEMAN["REPOSITORY"]."""
    path = get_priceman_setting("REPOSITORY")
    return import_string(path)()
