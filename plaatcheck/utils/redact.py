"""
Utilitats de redacció per a logs (AVG/RGPD)

Un kenteken és una dada personal indirecta: mai en clar als logs de producció.
"""
from typing import Optional


def redact_plate(kenteken: Optional[str]) -> str:
    """
    Redacta un kenteken per a logs.
    "AB12CD"   → "AB****"
    "AB-12-CD" → "AB******"
    """
    if not kenteken or len(kenteken) < 3:
        return "***"
    return kenteken[:2] + "*" * (len(kenteken) - 2)


def redact_lookup_info(kenteken: Optional[str], gevonden: Optional[bool], secties: Optional[int]) -> dict:
    """
    Retorna un dict segur per a logging: dades tècniques sense el kenteken en clar.
    """
    return {
        "kenteken": redact_plate(kenteken),
        "gevonden": gevonden,
        "secties": secties,
    }


def redact_path(path: str) -> str:
    """
    Redacta el kenteken dins d'una ruta de consulta.
    "/kenteken/AB12CD/ruw" → "/kenteken/AB****/ruw"
    """
    parts = path.split("/")
    if len(parts) > 2 and parts[1] == "kenteken" and parts[2] not in ("", "format"):
        parts[2] = redact_plate(parts[2])
    return "/".join(parts)
