"""
Django AppConfig para priceman.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class PricemanConfig(AppConfig):
    name = "priceman"
    label = "priceman"
    verbose_name = _("Preços")
    default_auto_field = "django.db.models.BigAutoField"
