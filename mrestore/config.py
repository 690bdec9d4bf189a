from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from mrestore.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    GEMINI_DEFAULT_API_BASE,
    GEMINI_DEFAULT_MODEL,
    MSG_ERR_BAD_TIMEOUT,
)


@dataclass(frozen=True)
class Config:
    gemini_api_key: Optional[str]
    gemini_model: str
    gemini_api_base: str
    gemini_timeout: float
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        api_key = os.getenv("GOOGLE_GEMINI_API_KEY") or None
        model = os.getenv("GEMINI_MODEL") or GEMINI_DEFAULT_MODEL
        api_base = os.getenv("GEMINI_API_BASE") or GEMINI_DEFAULT_API_BASE
        timeout = os.getenv("GEMINI_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))
        log_level = os.getenv("LOG_LEVEL", "INFO")

        return cls._validate(
            gemini_api_key=api_key,
            gemini_model=model,
            gemini_api_base=api_base.rstrip("/"),
            gemini_timeout=float(timeout),
            log_level=log_level,
        )

    @staticmethod
    def _validate(
        gemini_api_key: Optional[str],
        gemini_model: str,
        gemini_api_base: str,
        gemini_timeout: float,
        log_level: str,
    ) -> "Config":
        # A missing key is reported by the inference client on first use.
        match gemini_timeout:
            case t if t <= 0:
                raise ValueError(MSG_ERR_BAD_TIMEOUT)
            case _:
                pass

        return Config(
            gemini_api_key=gemini_api_key,
            gemini_model=gemini_model,
            gemini_api_base=gemini_api_base,
            gemini_timeout=gemini_timeout,
            log_level=log_level,
        )
