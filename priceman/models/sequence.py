from __future__ import annotations

from django.db import models
from django.utils.translation import gettext_lazy as _


class ProductSequence(models.Model):
    """
    Contador monotônico de ids de produto.

    Garante max(ids emitidos) + 1 mesmo em bancos que reaproveitam o maior id
    após um delete.
    """

    name = models.CharField(_("nome"), max_length=64, unique=True)
    last_value = models.BigIntegerField(_("último valor"), default=0)

    class Meta:
        app_label = "priceman"
        verbose_name = _("sequência de produto")
        verbose_name_plural = _("sequências de produto")

    def __str__(self) -> str:
        return f"{self.name}:{self.last_value}"
