# iceonwheels/settings.py
from __future__ import annotations
from typing import List, Optional
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
import os

_DEFAULT_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _parse_list(v: Optional[str | List[str]], default: List[str]) -> List[str]:
    """
    Accept JSON array (e.g. '["http://localhost:3000"]') or
    comma-separated string ('http://localhost:3000,http://127.0.0.1:3000').
    """
    if v is None:
        return list(default)
    if isinstance(v, list):
        return v
    s = v.strip()
    if not s:
        return list(default)
    # try JSON first
    try:
        parsed = json.loads(s)
        if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
            return parsed
    except ValueError:
        pass
    # fallback: comma separated
    return [p.strip() for p in s.split(",") if p.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",   # ignore unknown env keys instead of raising
    )

    # --- API ---
    api_host: str = Field(default="127.0.0.1", validation_alias=AliasChoices("API_HOST",))
    api_port: int = Field(default=8000,        validation_alias=AliasChoices("API_PORT",))
    cors_origins_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("CORS_ORIGINS",)
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL",))
    log_json: bool = Field(default=False, validation_alias=AliasChoices("LOG_JSON",))

    # --- Firebase ---
    firebase_project_id: str = Field(
        default="iceonwheels",
        validation_alias=AliasChoices("FIREBASE_PROJECT_ID",)
    )
    google_application_credentials: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_APPLICATION_CREDENTIALS",)
    )
    promo_collection: str = Field(
        default="promoCodes", validation_alias=AliasChoices("PROMO_COLLECTION",)
    )
    orders_collection: str = Field(
        default="orders", validation_alias=AliasChoices("ORDERS_COLLECTION",)
    )

    # --- Store / receipt ---
    currency_symbol: str = Field(default="₹", validation_alias=AliasChoices("CURRENCY_SYMBOL",))
    store_name: str = Field(
        default="🍨 ICE ON WHEELS 🍨", validation_alias=AliasChoices("STORE_NAME",)
    )
    store_bylines_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("STORE_BYLINES",)
    )
    store_footer_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("STORE_FOOTER",)
    )
    store_website: str = Field(
        default="www.iceonwheels.com", validation_alias=AliasChoices("STORE_WEBSITE",)
    )
    # receipts print local time; IST by default
    receipt_utc_offset_minutes: int = Field(
        default=330, validation_alias=AliasChoices("RECEIPT_UTC_OFFSET_MINUTES",)
    )

    # --- Bluetooth printer ---
    printer_chunk_size: int = Field(
        default=20, gt=0, validation_alias=AliasChoices("PRINTER_CHUNK_SIZE",)
    )
    printer_name_prefixes_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("PRINTER_NAME_PREFIXES",)
    )
    printer_service_uuid: str = Field(
        default="000018f0-0000-1000-8000-00805f9b34fb",
        validation_alias=AliasChoices("PRINTER_SERVICE_UUID",)
    )
    printer_characteristic_uuid: str = Field(
        default="00002af1-0000-1000-8000-00805f9b34fb",
        validation_alias=AliasChoices("PRINTER_CHARACTERISTIC_UUID",)
    )
    printer_scan_timeout: float = Field(
        default=5.0, validation_alias=AliasChoices("PRINTER_SCAN_TIMEOUT",)
    )
    printer_require_secure_context: bool = Field(
        default=True, validation_alias=AliasChoices("PRINTER_REQUIRE_SECURE_CONTEXT",)
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_list(self.cors_origins_raw, _DEFAULT_ORIGINS)

    @property
    def store_bylines(self) -> List[str]:
        return _parse_list(
            self.store_bylines_raw,
            ["Your Favorite Ice Cream Cart", "Fresh & Delicious Treats"],
        )

    @property
    def store_footer(self) -> List[str]:
        return _parse_list(
            self.store_footer_raw,
            ["Thank you for choosing", "Ice on Wheels!", "Visit us again soon! 🍦"],
        )

    @property
    def printer_name_prefixes(self) -> List[str]:
        return _parse_list(self.printer_name_prefixes_raw, ["Printer", "POS", "Thermal"])


# singleton
settings = Settings()

# Make sure GOOGLE_APPLICATION_CREDENTIALS is exported for firebase_admin
if settings.google_application_credentials:
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = settings.google_application_credentials
