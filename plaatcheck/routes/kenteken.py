"""
Rutes de consulta per kenteken — Contracte unificat v1
"""
import logging
import time
from fastapi import APIRouter, HTTPException, Query
from plaatcheck.models.base_response import MetaInfo
from plaatcheck.models.vehicle_response import (
    KentekenResponse, RuwResponse, FormatResponse, RDWData, is_all_empty,
)
from plaatcheck.parsers.plate_parser import clean_plate, format_license_plate
from plaatcheck.parsers.section_builder import section_builder
from plaatcheck.services.rdw_service import rdw_service, RDWError
from plaatcheck.utils.redact import redact_plate, redact_lookup_info

log = logging.getLogger("plaatcheck.kenteken")

PLATE_LENGTH = 6

router = APIRouter()


def _niet_gevonden(kenteken: str) -> MetaInfo:
    return MetaInfo(success=False, message=f"Geen gegevens gevonden voor kenteken: {kenteken}")


def _normalize_or_400(raw: str) -> str:
    cleaned = clean_plate(raw)
    if len(cleaned) != PLATE_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Kenteken moet {PLATE_LENGTH} letters of cijfers bevatten.",
        )
    return format_license_plate(cleaned)


async def _lookup(kenteken: str) -> RDWData | None:
    """
    Executa l'agregació. Un error de transport es registra i es tracta
    igual que un resultat buit (None).
    """
    t0 = time.monotonic()
    try:
        data = await rdw_service.fetch_all_car_data(kenteken)
    except RDWError:
        log.exception("rdw_lookup_failed", extra={
            "kenteken": redact_plate(kenteken),
            "durada_ms": round((time.monotonic() - t0) * 1000),
        })
        return None
    return data


@router.get("/format", response_model=FormatResponse)
async def format_kenteken(
    invoer: str = Query(default="", max_length=32, description="Text tal com l'escriu l'usuari"),
):
    """Reformata una entrada parcial (per cada tecla del camp de cerca)."""
    return FormatResponse(invoer=invoer, kenteken=format_license_plate(invoer))


@router.get("/{kenteken}", response_model=KentekenResponse)
async def lookup_kenteken(kenteken: str):
    """
    Consulta totes les dades RDW d'un kenteken i les retorna en seccions.

    - Transport fallit o cap dada: gevonden=false amb el mateix missatge.
    - Seccions sense cap camp present: no apareixen.
    """
    plate = _normalize_or_400(kenteken)

    try:
        data = await _lookup(plate)

        if is_all_empty(data):
            log.info("lookup_empty", extra=redact_lookup_info(plate, False, 0))
            return KentekenResponse(kenteken=plate, gevonden=False, meta=_niet_gevonden(plate))

        secties, keuringen = section_builder.build(data)
        log.info("lookup_success", extra=redact_lookup_info(plate, True, len(secties)))
        return KentekenResponse(
            kenteken=plate,
            gevonden=True,
            secties=secties,
            keuringen=keuringen,
            meta=MetaInfo(success=True, message="Gegevens gevonden."),
        )

    except HTTPException:
        raise
    except Exception:
        log.exception("lookup_unexpected_error")
        raise HTTPException(status_code=500, detail="Interne fout bij het ophalen van gegevens.")


@router.get("/{kenteken}/ruw", response_model=RuwResponse)
async def lookup_kenteken_ruw(kenteken: str):
    """Retorna l'agregat RDW sense transformar."""
    plate = _normalize_or_400(kenteken)

    try:
        data = await _lookup(plate)
        if is_all_empty(data):
            return RuwResponse(kenteken=plate, gevonden=False, meta=_niet_gevonden(plate))
        return RuwResponse(kenteken=plate, gevonden=True, data=data, meta=MetaInfo(success=True))

    except HTTPException:
        raise
    except Exception:
        log.exception("lookup_unexpected_error")
        raise HTTPException(status_code=500, detail="Interne fout bij het ophalen van gegevens.")
