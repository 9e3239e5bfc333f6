"""
Parser de kentekens (matrícules neerlandeses)

Neteja l'entrada de l'usuari i hi insereix els guions segons el primer
patró de sidecode que coincideixi. Mai falla: si cap patró coincideix,
retorna el text net (lletres/dígits en majúscula) sense agrupar.
"""
import re

# ---------------------------------------------------------------------------
# Patrons de sidecode (L = lletra, D = dígit). L'ordre és la prioritat.
# ---------------------------------------------------------------------------

PLATE_FORMATS: tuple[re.Pattern, ...] = tuple(re.compile(p) for p in (
    r"^([A-Z]{2})([0-9]{2})([0-9]{2})$",    # LL-DD-DD
    r"^([0-9]{2})([0-9]{2})([A-Z]{2})$",    # DD-DD-LL
    r"^([0-9]{2})([A-Z]{2})([0-9]{2})$",    # DD-LL-DD
    r"^([A-Z]{2})([0-9]{2})([A-Z]{2})$",    # LL-DD-LL
    r"^([A-Z]{2})([A-Z]{2})([0-9]{2})$",    # LL-LL-DD
    r"^([A-Z]{2})([0-9]{3})([A-Z])$",       # LL-DDD-L
    r"^([A-Z])([0-9]{3})([A-Z]{2})$",       # L-DDD-LL
    r"^([0-9]{3})([A-Z]{2})([A-Z])$",       # DDD-LL-L
    r"^([A-Z])([0-9]{2})([A-Z]{3})$",       # L-DD-LLL
))

_NOT_ALNUM = re.compile(r"[^A-Za-z0-9]")


def clean_plate(value: str) -> str:
    """Només lletres i dígits ASCII, en majúscula."""
    return _NOT_ALNUM.sub("", value or "").upper()


def strip_plate(value: str) -> str:
    """Treu els guions abans de consultar l'API ("AB-12-CD" → "AB12CD")."""
    return (value or "").replace("-", "")


def format_license_plate(value: str) -> str:
    """
    "a123bc"   → "A-123-BC"
    "ab 12 cd" → "AB-12-CD"
    "x"        → "X"
    """
    cleaned = clean_plate(value)
    for pattern in PLATE_FORMATS:
        m = pattern.match(cleaned)
        if m:
            return "-".join(m.groups())
    return cleaned
