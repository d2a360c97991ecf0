"""
Configuration management for the transaction builder.

Values come from the environment or a .env file; CLI options override them.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from siatx.constants import DEFAULT_FEE_ESTIMATE_BYTES, DEFAULT_SEND_AMOUNT
from siatx.models import parse_currency


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    siascan_api_base_url: str = "https://api.siascan.com"

    # Wallet settings
    our_address: str = ""
    recipient_address: str = ""
    public_key: str = ""  # ed25519 key of our address, hex with or without "ed25519:"

    # Spend settings
    send_amount: int = DEFAULT_SEND_AMOUNT  # hastings
    fee_estimate_bytes: int = Field(default=DEFAULT_FEE_ESTIMATE_BYTES, gt=0)

    request_timeout: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"

    @field_validator("send_amount", mode="before")
    @classmethod
    def validate_send_amount(cls, v: object) -> int:
        return parse_currency(v)


def get_settings() -> Settings:
    return Settings()
