"""
Servei RDW Open Data

Consulta les set categories d'un kenteken en paral·lel i, un cop coneguda
la llista de keuringen, els gebreken de cada rapportnummer (també en paral·lel).
Sense reintents ni memòria cau: cada consulta construeix un RDWData nou.
"""
import asyncio
import logging
import time
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx

from plaatcheck.config import settings
from plaatcheck.models.vehicle_response import CATEGORIES, RDWData, Gebrek
from plaatcheck.parsers.plate_parser import strip_plate
from plaatcheck.utils.redact import redact_plate

log = logging.getLogger("plaatcheck.rdw")


class RDWError(Exception):
    """Error de transport consultant RDW (xarxa o cos no JSON)."""


class RDWService:
    """Agregador de dades RDW per kenteken"""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        partial_failure: Optional[bool] = None,
    ):
        missing = [c for c in CATEGORIES if c not in settings.rdw_endpoints]
        if missing:
            raise ValueError(f"Falten plantilles RDW per: {missing}")

        self.endpoints = {c: settings.rdw_endpoints[c] for c in CATEGORIES}
        self.defects_endpoint = settings.rdw_defects_endpoint
        self.timeout = settings.rdw_timeout_seconds
        self.transport = transport
        self.partial_failure = (
            settings.rdw_partial_failure if partial_failure is None else partial_failure
        )

        self.headers = {"Accept": "application/json"}
        if settings.rdw_app_token:
            self.headers["X-App-Token"] = settings.rdw_app_token

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def build_urls(self, kenteken: str) -> dict[str, str]:
        """Substitueix el kenteken (sense guions) a cada plantilla."""
        clean = quote(strip_plate(kenteken), safe="")
        return {c: tpl.format(kenteken=clean) for c, tpl in self.endpoints.items()}

    def defects_url(self, rapportnummer: str) -> str:
        return self.defects_endpoint.format(rapportnummer=quote(rapportnummer, safe=""))

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"headers": self.headers}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return httpx.AsyncClient(**kwargs)

    async def _get_list(self, client: httpx.AsyncClient, url: str) -> list[Any]:
        """GET que retorna sempre una llista de registres."""
        try:
            response = await client.get(url)
            payload = response.json()
        except httpx.HTTPError as e:
            raise RDWError(f"RDW GET failed @ {url}: {e}") from e
        except ValueError as e:
            raise RDWError(f"RDW JSON parse error @ {url} (HTTP {response.status_code}): {e}") from e

        if response.is_error:
            log.warning("rdw_http_status", extra={"url": url, "status_code": response.status_code})

        if not isinstance(payload, list):
            log.warning("rdw_unexpected_payload", extra={
                "url": url,
                "payload_type": type(payload).__name__,
            })
            return []
        return [row for row in payload if isinstance(row, dict)]

    async def _gather(self, coros: Sequence, labels: Sequence[str]) -> list[list[Any]]:
        """
        Executa les peticions en paral·lel.
        - Mode per defecte: la primera fallada cancel·la la resta i es propaga.
        - Mode partial_failure: cada petició fallida compta com a llista buida.
        """
        tasks = [asyncio.ensure_future(c) for c in coros]
        if not self.partial_failure:
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for t in tasks:
                    t.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        results = await asyncio.gather(*tasks, return_exceptions=True)
        out: list[list[Any]] = []
        for label, res in zip(labels, results):
            if isinstance(res, RDWError):
                log.warning("rdw_request_failed", extra={"consulta": label, "error": str(res)})
                out.append([])
            elif isinstance(res, BaseException):
                raise res
            else:
                out.append(res)
        return out

    # ------------------------------------------------------------------
    # Agregació
    # ------------------------------------------------------------------

    async def fetch_all_car_data(self, kenteken: str) -> RDWData:
        """
        Retorna l'agregat complet per un kenteken.

        Raises:
            RDWError: si falla el transport d'alguna consulta (fora de partial_failure)
        """
        clean = strip_plate(kenteken)
        urls = self.build_urls(clean)
        t0 = time.monotonic()

        async with self._client() as client:
            lists = await self._gather(
                [self._get_list(client, urls[c]) for c in CATEGORIES], CATEGORIES
            )
            results = dict(zip(CATEGORIES, lists))

            apk = results["apk"]
            rapportnummers = list(dict.fromkeys(
                str(insp["rapportnummer"]) for insp in apk if insp.get("rapportnummer")
            ))
            defect_lists = await self._gather(
                [self._get_list(client, self.defects_url(r)) for r in rapportnummers],
                [f"gebreken:{r}" for r in rapportnummers],
            )

        defects = {
            r: [Gebrek.model_validate(g) for g in rows]
            for r, rows in zip(rapportnummers, defect_lists)
        }

        data = RDWData(
            base=_first(results["base"]),
            fuel=_first(results["fuel"]),
            mileage=_first(results["mileage"]),
            apk=apk,
            defects=defects,
            specs=_first(results["specs"]),
            emissions=_first(results["emissions"]),
            wltp=_first(results["wltp"]),
        )

        log.info("rdw_lookup_ok", extra={
            "kenteken": redact_plate(clean),
            "keuringen": len(apk),
            "gebreken_consultes": len(rapportnummers),
            "buit": data.is_empty(),
            "durada_ms": round((time.monotonic() - t0) * 1000),
        })
        return data


def _first(rows: list[Any]) -> Optional[dict]:
    return rows[0] if rows else None


# Singleton
rdw_service = RDWService()
