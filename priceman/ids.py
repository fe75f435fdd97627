"""
Priceman IDs — Geração de identificadores únicos.
"""

from __future__ import annotations

import secrets
import string

from django.utils import timezone


# Caracteres seguros para IDs (sem ambíguos: 0/O, 1/l/I)
_SAFE_CHARS = string.ascii_uppercase.replace("O", "").replace("I", "") + string.digits.replace("0", "").replace("1", "")


def generate_barcode() -> str:
    """
    Gera código de barras interno para produtos cadastrados sem um.

    Formato: <epoch ms>-XXXXXXXXX
    """
    millis = int(timezone.now().timestamp() * 1000)
    random_part = "".join(secrets.choice(_SAFE_CHARS) for _ in range(9))
    return f"{millis}-{random_part}"
