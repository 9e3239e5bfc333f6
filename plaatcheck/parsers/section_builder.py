"""
Constructor de seccions a partir de l'agregat RDW

Phase 1 — make_field_map(): projecció registre → files (etiqueta, valor)
Phase 2 — SectionBuilder.build(): catàleg de seccions + keuringen amb gebreken

Python pur, cap crida externa.
"""
import logging
from typing import Any, Mapping, Optional
from plaatcheck.models.base_response import DataRow, StructuredSection
from plaatcheck.models.vehicle_response import (
    RDWData, APKKeuring, GebrekView, Gebrek,
)
from plaatcheck.utils.dates import format_date, is_compact_date

log = logging.getLogger("plaatcheck.sections")

# ---------------------------------------------------------------------------
# Catàleg de seccions: (títol, categoria, camp → etiqueta). L'ordre és el de render.
# ---------------------------------------------------------------------------

SECTIONS: tuple[tuple[str, str, dict[str, str]], ...] = (
    ("Voertuiggegevens", "base", {
        "kenteken": "Kenteken",
        "merk": "Merk",
        "handelsbenaming": "Model",
        "voertuigsoort": "Voertuigsoort",
        "inrichting": "Carrosserievorm",
        "eerste_kleur": "Kleur",
        "tweede_kleur": "Secundaire kleur",
        "aantal_deuren": "Aantal deuren",
        "aantal_wielen": "Aantal wielen",
        "aantal_cilinders": "Cilinders",
    }),
    ("Registratie & APK", "base", {
        "datum_eerste_toelating": "Datum eerste toelating",
        "datum_tenaamstelling": "Datum tenaamstelling",
        "vervaldatum_apk": "APK vervaldatum",
        "wam_verzekerd": "WAM verzekerd",
        "export_indicator": "Geëxporteerd",
        "openstaande_terugroepactie_indicator": "Terugroepactie?",
        "taxi_indicator": "Taxi?",
        "tenaamstellen_mogelijk": "Tenaamstellen mogelijk",
    }),
    ("Gewicht & Afmetingen", "base", {
        "massa_ledig_voertuig": "Leeggewicht",
        "massa_rijklaar": "Rijklaar gewicht",
        "toegestane_maximum_massa_voertuig": "Toegestane massa",
        "maximum_massa_samenstelling": "Max. massa samenstelling",
        "maximum_massa_trekken_ongeremd": "Trekken ongeremd",
        "maximum_trekken_massa_geremd": "Trekken geremd",
        "wielbasis": "Wielbasis (mm)",
    }),
    ("Motor & Emissie", "fuel", {
        "brandstof_omschrijving": "Brandstof",
        "uitlaatemissieniveau": "Emissieniveau",
        "nettomaximumvermogen": "Vermogen (kW)",
        "toerental_geluidsniveau": "Toerental bij geluidsmeting",
        "geluidsniveau_stationair": "Stationair geluidsniveau (dB)",
        "emissiecode_omschrijving": "Emissiecode",
    }),
    ("Carrosserie Info", "specs", {
        "type_carrosserie_europese_omschrijving": "Carrosserietype",
        "carrosserietype": "Typecode",
    }),
)

# Files de cada keuring: camp → (etiqueta, és data)
APK_FIELDS: dict[str, tuple[str, bool]] = {
    "vervaldatum_keuring": ("Vervaldatum", True),
    "keuringsresultaat": ("Resultaat", False),
    "soort_keuring": ("Soort keuring", False),
}

ONBEKEND_GEBREK = "Onbekend gebrek"


# ---------------------------------------------------------------------------
# Projecció de camps
# ---------------------------------------------------------------------------

def _display(value: Any) -> str:
    if is_compact_date(value):
        return format_date(value)
    return str(value)


def make_field_map(record: Optional[Mapping[str, Any]], fields: Mapping[str, str]) -> list[DataRow]:
    """
    Retorna les files en l'ordre de `fields`, ometent camps absents o null.
    Els textos de 8 dígits es formategen com a data.
    """
    if not record:
        return []
    return [
        DataRow(label=label, value=_display(record[key]))
        for key, label in fields.items()
        if record.get(key) is not None
    ]


def build_section(title: str, record: Optional[Mapping[str, Any]], fields: Mapping[str, str]) -> Optional[StructuredSection]:
    """None = res a mostrar (registre absent o cap fila)."""
    rows = make_field_map(record, fields)
    if not rows:
        return None
    return StructuredSection(titel=title, rijen=rows)


def _gebrek_view(gebrek: Gebrek) -> GebrekView:
    detail = ", ".join(p for p in (gebrek.soort, gebrek.locatie) if p)
    return GebrekView(
        omschrijving=gebrek.omschrijving or ONBEKEND_GEBREK,
        detail=detail or None,
    )


# ---------------------------------------------------------------------------
# Constructor principal
# ---------------------------------------------------------------------------

class SectionBuilder:
    """Transforma un RDWData en seccions i keuringen llestes per mostrar."""

    @staticmethod
    def build_sections(data: RDWData) -> list[StructuredSection]:
        sections = []
        for title, category, fields in SECTIONS:
            section = build_section(title, getattr(data, category), fields)
            if section is not None:
                sections.append(section)
        return sections

    @staticmethod
    def build_keuringen(data: RDWData) -> list[APKKeuring]:
        """Una entrada per keuring, en l'ordre de la font, amb els seus gebreken."""
        keuringen = []
        for insp in data.apk:
            rows = []
            for key, (label, is_date) in APK_FIELDS.items():
                raw = insp.get(key)
                if is_date:
                    rows.append(DataRow(label=label, value=format_date(None if raw is None else str(raw))))
                else:
                    rows.append(DataRow(label=label, value=None if raw is None else str(raw)))

            rapportnummer = str(insp["rapportnummer"]) if insp.get("rapportnummer") else None
            gebreken = data.defects.get(rapportnummer, []) if rapportnummer else []
            keuringen.append(APKKeuring(
                rapportnummer=rapportnummer,
                rijen=rows,
                gebreken=[_gebrek_view(g) for g in gebreken],
            ))
        return keuringen

    def build(self, data: RDWData) -> tuple[list[StructuredSection], list[APKKeuring]]:
        sections = self.build_sections(data)
        keuringen = self.build_keuringen(data)
        log.debug("sections_built", extra={
            "seccions": len(sections),
            "keuringen": len(keuringen),
        })
        return sections, keuringen


# Singleton
section_builder = SectionBuilder()
