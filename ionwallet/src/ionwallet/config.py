"""
Configuration management using pydantic-settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ioncore.constants import (
    MAX_RELATIVE_LOCKTIME_BLOCKS,
    TX_VERSION,
    WILL_INITIATION_FEE,
    WILL_REVOCATION_FEE,
)


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    network: Literal["mainnet", "testnet", "signet", "regtest"] = "testnet"
    tx_version: int = Field(default=TX_VERSION, ge=1, le=2)

    default_fee: int = Field(default=1000, ge=0)
    will_initiation_fee: int = Field(default=WILL_INITIATION_FEE, ge=0)
    will_revocation_fee: int = Field(default=WILL_REVOCATION_FEE, ge=0)
    default_locktime_blocks: int = Field(default=144, ge=0, le=MAX_RELATIVE_LOCKTIME_BLOCKS)

    snapshot_path: str = "snapshot.json"

    log_level: str = "INFO"


def get_settings() -> WalletSettings:
    return WalletSettings()
