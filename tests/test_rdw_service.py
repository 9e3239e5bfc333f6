"""
Tests del servei RDW amb transport simulat (httpx.MockTransport)
"""
import asyncio

import httpx
import pytest
from plaatcheck.services.rdw_service import RDWService, RDWError


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

class TestBuildUrls:
    def test_set_categories_sense_guions(self):
        urls = RDWService().build_urls("AB-12-CD")
        assert set(urls) == {"base", "fuel", "mileage", "apk", "specs", "emissions", "wltp"}
        assert all(u.endswith("kenteken=AB12CD") for u in urls.values())

    def test_defects_url(self):
        url = RDWService().defects_url("123")
        assert url.endswith("hx2c-gt7k.json?rapportnummer=123")


# ---------------------------------------------------------------------------
# Agregació
# ---------------------------------------------------------------------------

class TestFetchAllCarData:
    @pytest.mark.asyncio
    async def test_primera_fila_per_categoria(self, rdw_transport):
        transport = rdw_transport({
            "base": [{"kenteken": "AB12CD", "merk": "Volkswagen"}, {"kenteken": "AB12CD", "merk": "Altre"}],
        })
        data = await RDWService(transport=transport).fetch_all_car_data("AB-12-CD")
        assert data.base == {"kenteken": "AB12CD", "merk": "Volkswagen"}
        assert data.fuel is None
        assert data.apk == []
        assert data.is_empty() is False

    @pytest.mark.asyncio
    async def test_kenteken_sense_guions_a_la_consulta(self, rdw_transport):
        calls = []
        await RDWService(transport=rdw_transport({}, calls=calls)).fetch_all_car_data("AB-12-CD")
        assert len(calls) == 7
        assert all(params == {"kenteken": "AB12CD"} for _, params in calls)

    @pytest.mark.asyncio
    async def test_keuring_amb_gebreken(self, rdw_transport):
        transport = rdw_transport(
            {"apk": [{"rapportnummer": "123", "vervaldatum_keuring": "20250101"}]},
            defects={"123": [{"omschrijving": "Olie lekkage", "soort": "lichte gebrek"}]},
        )
        data = await RDWService(transport=transport).fetch_all_car_data("AB12CD")
        assert list(data.defects) == ["123"]
        assert len(data.defects["123"]) == 1
        assert data.defects["123"][0].omschrijving == "Olie lekkage"

    @pytest.mark.asyncio
    async def test_keuring_sense_rapportnummer_no_consulta(self, rdw_transport):
        calls = []
        transport = rdw_transport(
            {"apk": [{"soort_keuring": "APK"}, {"rapportnummer": ""}, {"rapportnummer": "7"}]},
            calls=calls,
        )
        data = await RDWService(transport=transport).fetch_all_car_data("AB12CD")
        defect_calls = [p for name, p in calls if name == "defects"]
        assert defect_calls == [{"rapportnummer": "7"}]
        assert list(data.defects) == ["7"]
        assert len(data.apk) == 3

    @pytest.mark.asyncio
    async def test_rapportnummer_repetit_una_consulta(self, rdw_transport):
        calls = []
        transport = rdw_transport({"apk": [{"rapportnummer": "5"}, {"rapportnummer": "5"}]}, calls=calls)
        await RDWService(transport=transport).fetch_all_car_data("AB12CD")
        assert sum(1 for name, _ in calls if name == "defects") == 1

    @pytest.mark.asyncio
    async def test_tot_buit(self, rdw_transport):
        data = await RDWService(transport=rdw_transport({})).fetch_all_car_data("AB12CD")
        assert data.is_empty() is True
        assert data.defects == {}

    @pytest.mark.asyncio
    async def test_payload_no_llista_es_buit(self):
        def handler(request):
            return httpx.Response(200, json={"error": True, "message": "query error"})

        data = await RDWService(transport=httpx.MockTransport(handler)).fetch_all_car_data("AB12CD")
        assert data.is_empty() is True


# ---------------------------------------------------------------------------
# Concurrència i ordre
# ---------------------------------------------------------------------------

class _GatedTransport(httpx.AsyncBaseTransport):
    """
    Reté cada resposta de categoria fins que les set peticions són en curs.
    Una implementació seqüencial exhaureix el temps d'espera en lloc de penjar-se.
    """

    def __init__(self, dataset_of, apk: list):
        self.dataset_of = dataset_of
        self.apk = apk
        self.events: list[str] = []
        self._in_flight = 0
        self._all_in = asyncio.Event()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        name = self.dataset_of(request)
        self.events.append(f"request:{name}")
        if name == "defects":
            return httpx.Response(200, json=[])

        self._in_flight += 1
        if self._in_flight == 7:
            self._all_in.set()
        await asyncio.wait_for(self._all_in.wait(), timeout=2.0)

        self.events.append(f"response:{name}")
        return httpx.Response(200, json=self.apk if name == "apk" else [])


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_set_categories_en_paral_lel(self, dataset_of):
        transport = _GatedTransport(dataset_of, apk=[])
        await RDWService(transport=transport).fetch_all_car_data("AB12CD")

        first_response = next(i for i, e in enumerate(transport.events) if e.startswith("response:"))
        assert len([e for e in transport.events[:first_response] if e.startswith("request:")]) == 7

    @pytest.mark.asyncio
    async def test_gebreken_despres_de_la_resposta_apk(self, dataset_of):
        transport = _GatedTransport(dataset_of, apk=[{"rapportnummer": "1"}, {"rapportnummer": "2"}])
        data = await RDWService(transport=transport).fetch_all_car_data("AB12CD")

        apk_done = transport.events.index("response:apk")
        defect_requests = [i for i, e in enumerate(transport.events) if e == "request:defects"]
        assert len(defect_requests) == 2
        assert all(i > apk_done for i in defect_requests)
        assert data.defects == {"1": [], "2": []}


# ---------------------------------------------------------------------------
# Errors de transport
# ---------------------------------------------------------------------------

class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_fuel_falla_tot_falla(self, rdw_transport):
        transport = rdw_transport({"base": [{"merk": "Opel"}]}, fail={"fuel"})
        with pytest.raises(RDWError):
            await RDWService(transport=transport, partial_failure=False).fetch_all_car_data("AB12CD")

    @pytest.mark.asyncio
    async def test_gebreken_fallen_tot_falla(self, rdw_transport):
        transport = rdw_transport({"apk": [{"rapportnummer": "1"}]}, fail={"defects"})
        with pytest.raises(RDWError):
            await RDWService(transport=transport, partial_failure=False).fetch_all_car_data("AB12CD")

    @pytest.mark.asyncio
    async def test_estat_http_error_cos_no_json(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(RDWError):
            await RDWService(transport=httpx.MockTransport(handler), partial_failure=False).fetch_all_car_data("AB12CD")

    @pytest.mark.asyncio
    async def test_estat_http_error_amb_json_no_fa_fallar_la_resta(self, dataset_of):
        def handler(request):
            name = dataset_of(request)
            if name == "fuel":
                return httpx.Response(400, json={"error": True, "message": "query error"})
            if name == "base":
                return httpx.Response(200, json=[{"merk": "Opel"}])
            return httpx.Response(200, json=[])

        service = RDWService(transport=httpx.MockTransport(handler), partial_failure=False)
        data = await service.fetch_all_car_data("AB12CD")
        assert data.base == {"merk": "Opel"}
        assert data.fuel is None

    @pytest.mark.asyncio
    async def test_json_invalid(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        with pytest.raises(RDWError):
            await RDWService(transport=httpx.MockTransport(handler), partial_failure=False).fetch_all_car_data("AB12CD")

    @pytest.mark.asyncio
    async def test_partial_failure_categoria_absent(self, rdw_transport):
        transport = rdw_transport({"base": [{"merk": "Opel"}]}, fail={"fuel"})
        data = await RDWService(transport=transport, partial_failure=True).fetch_all_car_data("AB12CD")
        assert data.base == {"merk": "Opel"}
        assert data.fuel is None

    @pytest.mark.asyncio
    async def test_partial_failure_gebreken_buits(self, rdw_transport):
        transport = rdw_transport({"apk": [{"rapportnummer": "1"}]}, fail={"defects"})
        data = await RDWService(transport=transport, partial_failure=True).fetch_all_car_data("AB12CD")
        assert len(data.apk) == 1
        assert data.defects == {"1": []}
