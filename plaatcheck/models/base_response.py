"""
Contracte unificat de resposta (v1)

Tots els endpoints de consulta retornen blocs d'aquest format:
{
  "secties": [ { "titel": "...", "rijen": [ DataRow, ... ] }, ... ],
  "meta": { "success": bool, "message": "..." }
}

Regles:
  - una secció només existeix si té com a mínim una fila
  - el valor d'una fila sempre és text llest per mostrar (mai null)
"""
from pydantic import BaseModel, field_validator
from typing import Optional, List

# Marcador per valors desconeguts o buits
PLACEHOLDER = "—"


class DataRow(BaseModel):
    """Parell etiqueta → valor llest per mostrar."""
    label: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _placeholder_si_buit(cls, v):
        if v is None or v == "":
            return PLACEHOLDER
        return v


class StructuredSection(BaseModel):
    """Secció titulada amb les seves files, en l'ordre del catàleg."""
    titel: str
    rijen: List[DataRow]


class MetaInfo(BaseModel):
    """Informació de transport."""
    success: bool
    message: Optional[str] = None
