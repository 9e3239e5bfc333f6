"""
Models de dades RDW i resposta de l'endpoint /kenteken — Contracte unificat v1
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from plaatcheck.models.base_response import DataRow, StructuredSection, MetaInfo

# Categories amb un sol registre (primera fila de la resposta)
RECORD_CATEGORIES = ("base", "fuel", "mileage", "specs", "emissions", "wltp")

# Ordre fix de les set consultes
CATEGORIES = ("base", "fuel", "mileage", "apk", "specs", "emissions", "wltp")

# Registre pla tal com el retorna l'API (clau absent o None = absent)
RawRecord = Dict[str, Any]


class Gebrek(BaseModel):
    """Gebrek (defecte) constatat en una keuring, lligat pel rapportnummer."""
    model_config = ConfigDict(extra="allow")

    omschrijving: Optional[str] = None
    soort: Optional[str] = None
    locatie: Optional[str] = None


class RDWData(BaseModel):
    """Agregat complet per un kenteken. Es construeix de nou a cada consulta."""
    model_config = ConfigDict(frozen=True)

    base: Optional[RawRecord] = None
    fuel: Optional[RawRecord] = None
    mileage: Optional[RawRecord] = None
    apk: List[RawRecord] = Field(default_factory=list)
    defects: Dict[str, List[Gebrek]] = Field(default_factory=dict)
    specs: Optional[RawRecord] = None
    emissions: Optional[RawRecord] = None
    wltp: Optional[RawRecord] = None

    def is_empty(self) -> bool:
        """Buit si totes les categories són absents/buides i no hi ha keuringen."""
        if self.apk:
            return False
        return all(not getattr(self, c) for c in RECORD_CATEGORIES)


def is_all_empty(data: Optional[RDWData]) -> bool:
    if data is None:
        return True
    return data.is_empty()


# ---------------------------------------------------------------------------
# Vistes per la resposta
# ---------------------------------------------------------------------------

class GebrekView(BaseModel):
    omschrijving: str
    detail: Optional[str] = None      # "soort, locatie" (només els presents)


class APKKeuring(BaseModel):
    """Una keuring periòdica amb les seves files i gebreken."""
    rapportnummer: Optional[str] = None
    rijen: List[DataRow]
    gebreken: List[GebrekView] = []


class KentekenResponse(BaseModel):
    """Resposta de l'endpoint /kenteken/{kenteken} — Contracte unificat v1."""
    kenteken: str
    gevonden: bool
    secties: List[StructuredSection] = []
    keuringen: List[APKKeuring] = []
    meta: Optional[MetaInfo] = None


class RuwResponse(BaseModel):
    """Agregat RDW sense transformar."""
    kenteken: str
    gevonden: bool
    data: Optional[RDWData] = None
    meta: Optional[MetaInfo] = None


class FormatResponse(BaseModel):
    invoer: str
    kenteken: str
