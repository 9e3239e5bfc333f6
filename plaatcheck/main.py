"""
Plaatcheck - API FastAPI

Consulta de dades de vehicles per kenteken sobre RDW Open Data.
"""
import time
import logging
import json
from urllib.parse import urlsplit
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from plaatcheck.config import settings
from plaatcheck.routes import kenteken
from plaatcheck.utils.redact import redact_path

# Atributs estàndard d'un LogRecord (la resta són camps extra)
_RECORD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Format JSON per logs estructurats (compatible amb Datadog, Loki, etc.)"""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Afegir camps extra (mètriques, context)
        for key, val in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = val
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _configure_logging() -> None:
    root = logging.getLogger("plaatcheck")
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.setLevel(logging.DEBUG if settings.debug else settings.log_level.upper())
    root.addHandler(handler)
    root.propagate = False


_configure_logging()
log = logging.getLogger("plaatcheck.request")

# Crear app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Voertuiggegevens per kenteken (RDW Open Data)",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Middleware de latència i logging de peticions
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Registra mètrica de latència per a cada petició."""
    t0 = time.monotonic()
    response = await call_next(request)
    durada_ms = round((time.monotonic() - t0) * 1000)
    log.info(
        "http_request",
        extra={
            "method": request.method,
            "path": redact_path(request.url.path),
            "status_code": response.status_code,
            "durada_ms": durada_ms,
        }
    )
    return response


# Routes
app.include_router(kenteken.router, prefix="/kenteken", tags=["Kenteken"])


@app.get("/")
async def root():
    """Root endpoint - retorna només estat bàsic"""
    return {"status": "ok"}


@app.get("/health")
async def health():
    """Endpoint de health check"""
    from plaatcheck.services.rdw_service import rdw_service

    return {
        "status": "healthy",
        "services": {
            "rdw": urlsplit(rdw_service.endpoints["base"]).netloc,
            "partial_failure": rdw_service.partial_failure,
        }
    }
