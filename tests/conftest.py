"""
Fixtures compartides: RDW simulat amb httpx.MockTransport
"""
import httpx
import pytest

DATASETS = {
    "m9d7-ebf2": "base",
    "8ys7-d773": "fuel",
    "qyyz-sp7a": "mileage",
    "vkij-7mwc": "apk",
    "vezc-m2t6": "specs",
    "j49n-pgkz": "emissions",
    "e8ys-bvje": "wltp",
    "hx2c-gt7k": "defects",
}


def _dataset(request: httpx.Request) -> str:
    return DATASETS[request.url.path.rsplit("/", 1)[-1].removesuffix(".json")]


def make_transport(responses: dict, defects: dict | None = None, fail: set | None = None, calls: list | None = None):
    """
    responses: categoria → llista retornada (absent = [])
    defects:   rapportnummer → llista de gebreken
    fail:      categories on el transport falla
    calls:     si es passa, hi afegeix (categoria, params) de cada petició
    """
    defects = defects or {}
    fail = fail or set()

    def handler(request: httpx.Request) -> httpx.Response:
        name = _dataset(request)
        if calls is not None:
            calls.append((name, dict(request.url.params)))
        if name in fail:
            raise httpx.ConnectError("network unreachable", request=request)
        if name == "defects":
            return httpx.Response(200, json=defects.get(request.url.params["rapportnummer"], []))
        return httpx.Response(200, json=responses.get(name, []))

    return httpx.MockTransport(handler)


@pytest.fixture
def rdw_transport():
    return make_transport


@pytest.fixture
def dataset_of():
    """Categoria RDW d'una petició (pel codi de dataset de la URL)."""
    return _dataset
