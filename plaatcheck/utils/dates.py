"""
Utilitats de format de dates per mostrar (DD-MM-YYYY)

L'API RDW barreja dos formats:
  "2024-08-08T00:00:00.000" (ISO) i "20240808" (compacte)
Cap validació de calendari: "20241301" → "01-13-2024".
"""
import re
from typing import Optional
from plaatcheck.models.base_response import PLACEHOLDER

_COMPACT_DATE = re.compile(r"[0-9]{8}")


def is_compact_date(value) -> bool:
    """True si el valor és un text de 8 dígits exactes (YYYYMMDD)."""
    return isinstance(value, str) and bool(_COMPACT_DATE.fullmatch(value))


def format_date(raw: Optional[str]) -> str:
    """
    Converteix una data ISO o compacta a DD-MM-YYYY.
    "2025-01-01T00:00:00" → "01-01-2025"
    "20250101"            → "01-01-2025"
    ""                    → "—"
    "garbage"             → "garbage"
    """
    if not raw:
        return PLACEHOLDER
    parts = raw[:10].split("-")
    if len(parts) == 3:
        return f"{parts[2]}-{parts[1]}-{parts[0]}"
    if is_compact_date(raw):
        return f"{raw[6:]}-{raw[4:6]}-{raw[:4]}"
    return raw
