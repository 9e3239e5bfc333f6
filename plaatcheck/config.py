"""
Configuració de Plaatcheck
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Configuració de l'aplicació"""

    # App
    app_name: str = "Plaatcheck"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["*"]

    # RDW Open Data (Socrata). Una plantilla per categoria, amb {kenteken}.
    rdw_endpoints: dict[str, str] = {
        "base": "https://opendata.rdw.nl/resource/m9d7-ebf2.json?kenteken={kenteken}",
        "fuel": "https://opendata.rdw.nl/resource/8ys7-d773.json?kenteken={kenteken}",
        "mileage": "https://opendata.rdw.nl/resource/qyyz-sp7a.json?kenteken={kenteken}",
        "apk": "https://opendata.rdw.nl/resource/vkij-7mwc.json?kenteken={kenteken}",
        "specs": "https://opendata.rdw.nl/resource/vezc-m2t6.json?kenteken={kenteken}",
        "emissions": "https://opendata.rdw.nl/resource/j49n-pgkz.json?kenteken={kenteken}",
        "wltp": "https://opendata.rdw.nl/resource/e8ys-bvje.json?kenteken={kenteken}",
    }
    rdw_defects_endpoint: str = (
        "https://opendata.rdw.nl/resource/hx2c-gt7k.json?rapportnummer={rapportnummer}"
    )
    rdw_app_token: Optional[str] = None
    rdw_timeout_seconds: Optional[float] = None   # None = timeout per defecte d'httpx

    # Si True, cada categoria falla per separat (absent) en lloc de tota l'agregació
    rdw_partial_failure: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False


# Singleton de configuració
settings = Settings()
