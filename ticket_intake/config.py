from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ticket_intake.models.rules import IntakeRules, RegionFractions

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Service configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # General
    log_level: str = Field("INFO", description="Root logger level.")

    # Storage
    storage_backend: Literal["gcs", "local"] = Field("gcs")
    local_storage_root: str = Field("./local-bucket", description="Root directory used when storage_backend=local.")
    storage_retry_deadline: float = Field(
        0.0, ge=0, description="Seconds to keep retrying transient storage faults; 0 disables retries."
    )

    # Recognition
    recognizer: str = Field("tesseract")
    tesseract_cmd: Optional[str] = Field(default=None, description="Path to the tesseract binary.")
    tesseract_lang: str = Field("eng")

    # Duplicate ledger (Google Sheets)
    ledger_backend: Literal["sheets", "static"] = Field("sheets")
    sheet_id: str = Field("", description="Spreadsheet ID of the ticket ledger.")
    ledger_column: str = Field("D:D", description="A1 range holding accepted ticket numbers.")
    ledger_static_path: Optional[str] = Field(default=None, description="Newline separated ledger file (static backend).")
    ledger_timeout: float = Field(10.0, gt=0)
    ledger_retries: int = Field(0, ge=0, description="Connection retries for ledger HTTP calls.")
    google_secret_name: str = Field("GOOGLE_CREDENTIALS_JSON", description="Secret holding the ledger service account.")
    google_credentials_json: Optional[str] = Field(
        default=None,
        description="Path to service-account JSON file or JSON string itself.",
    )

    # Ticket rules
    ticket_content_type: str = Field("image/png")
    ticket_min_bytes: int = Field(10_000)
    ticket_max_bytes: int = Field(5_000_000)
    ticket_aspect: float = Field(0.47)
    ticket_aspect_tolerance: float = Field(0.05)
    ticket_min_variance: float = Field(500.0)
    ticket_threshold: int = Field(180)
    ticket_roi_left: float = Field(0.667)
    ticket_roi_top: float = Field(0.005)
    ticket_roi_width: float = Field(0.33)
    ticket_roi_height: float = Field(0.07)
    ticket_target_width: int = Field(600)
    ticket_identifier_strategy: Literal["longest_token", "strip_whitespace"] = Field("longest_token")
    ticket_charset: Literal["digits", "alphanumeric"] = Field("digits")

    def rules(self) -> IntakeRules:
        """Build the validated rule set shared by the gates and the normalizer."""

        return IntakeRules(
            accepted_content_type=self.ticket_content_type,
            min_bytes=self.ticket_min_bytes,
            max_bytes=self.ticket_max_bytes,
            canonical_aspect=self.ticket_aspect,
            aspect_tolerance=self.ticket_aspect_tolerance,
            min_variance=self.ticket_min_variance,
            binarize_threshold=self.ticket_threshold,
            roi=RegionFractions(
                left=self.ticket_roi_left,
                top=self.ticket_roi_top,
                width=self.ticket_roi_width,
                height=self.ticket_roi_height,
            ),
            target_width=self.ticket_target_width,
            identifier_strategy=self.ticket_identifier_strategy,
            charset=self.ticket_charset,
        )


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
