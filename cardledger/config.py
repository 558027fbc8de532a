from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardLedger"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/cardledger"

    cors_origins: list[str] = ["http://localhost:5173"]

    default_image_url: str = "/default-card.jpg"
    upload_dir: Path = Path(__file__).parent.parent / "uploads"

    max_image_bytes: int = 5 * 1024 * 1024
    max_spreadsheet_bytes: int = 10 * 1024 * 1024

    # Free plan card cap; Premium is unlimited
    free_card_limit: int = 10


settings = Settings()


# =============================================================================
# DOMAIN CONSTANTS
# =============================================================================

# System row shared by every user; a virtual "all cards" view
MAIN_COLLECTION_ID = 1
MAIN_COLLECTION_NAME = "Main Collection"

# Length of every top-N ranking in the statistics record
TOP_N = 3

# Categories need at least this many sold cards to be ranked by ROI.
# Fixed business rule, not a tunable.
ROI_MIN_SOLD_CARDS = 2

# Valuation series downsampling thresholds (sample counts)
ALL_TIME_MAX_POINTS = 30
YEAR_MAX_POINTS = 15

UNCATEGORIZED = "Uncategorized"
