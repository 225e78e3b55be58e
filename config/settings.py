from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Auction rules (defaults reproduce the reference session)
    WINNING_SLOTS: int = 100
    PER_PARTICIPANT_CAP: int = 4
    INITIAL_THRESHOLD: int = 2000
    AUCTION_DURATION_TICKS: int = 300

    # Synthetic demand
    DEMAND_BATCH_SIZE: int = 100
    DEMAND_PRICE_SPREAD: int = 3000
    DEMAND_MAX_QUANTITY: int = 4
    MAX_DEMAND_BATCH_SIZE: int = 1000  # hard bound per clearing pass

    # REINSTATE: demoted bids are re-ranked every pass and may come back
    # STAY_DEMOTED: a demoted bid never re-enters the ranking
    REENTRY_POLICY: Literal["REINSTATE", "STAY_DEMOTED"] = "REINSTATE"

    # Clock
    TICK_INTERVAL_SECONDS: float = 1.0
    AUTO_TICK: bool = False  # tests and scripted runs drive /tick themselves

    # App
    APP_NAME: str = "Primebid Auction"
    DEBUG: bool = False


settings = Settings()
