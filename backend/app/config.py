from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    port: int = 8000
    host: str = "0.0.0.0"
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"
    temperature: float = 0.2
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"


def _split_origins(raw: str) -> Tuple[str, ...]:
    origins = tuple(part.strip() for part in raw.split(",") if part.strip())
    return origins or ("*",)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build the immutable settings value once at startup.

    Reads ``.env`` (without overriding variables already exported) unless an
    explicit mapping is given, which keeps tests independent of the host.
    """
    if environ is None:
        load_dotenv(override=False)
        environ = os.environ

    return Settings(
        port=int(environ.get("PORT", "8000")),
        host=environ.get("HOST", "0.0.0.0"),
        openai_api_key=environ.get("OPENAI_API_KEY", "").strip(),
        openai_base_url=environ.get("OPENAI_BASE_URL", "").strip() or None,
        openai_model=environ.get("OPENAI_MODEL", "gpt-3.5-turbo").strip() or "gpt-3.5-turbo",
        temperature=float(environ.get("OPENAI_TEMPERATURE", "0.2")),
        cors_origins=_split_origins(environ.get("CORS_ORIGINS", "*")),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
