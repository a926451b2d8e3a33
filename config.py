from typing import Optional

from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = Field(default="GST Invoice Generator", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Catalog sources; empty means use the built-in seed data
    INVENTORY_CSV: str = Field(default="", validation_alias=AliasChoices("INVENTORY_CSV", "inventory_csv"))
    COMPANIES_CSV: str = Field(default="", validation_alias=AliasChoices("COMPANIES_CSV", "companies_csv"))
    HSN_CSV: str = Field(default="data/hsn_rates.csv", validation_alias=AliasChoices("HSN_CSV", "hsn_csv"))

    # Invoice defaults
    DEFAULT_PAYMENT_TERMS: str = Field(default="30days", validation_alias=AliasChoices("DEFAULT_PAYMENT_TERMS", "default_payment_terms"))
    DEFAULT_TRANSPORT_MODE: str = Field(default="road", validation_alias=AliasChoices("DEFAULT_TRANSPORT_MODE", "default_transport_mode"))

    # Line item policies
    ENFORCE_STOCK_CAP: bool = Field(default=True, validation_alias=AliasChoices("ENFORCE_STOCK_CAP", "enforce_stock_cap"))
    # Rate given to newly added lines instead of the catalog rate (0 forces manual entry)
    INITIAL_RATE_OVERRIDE: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("INITIAL_RATE_OVERRIDE", "initial_rate_override"),
    )


settings = Settings()
