from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Tuple

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KEPAYROLL_")

    APP_NAME: str = Field("kepayroll", description="Top-level package logger name")
    LOG_LEVEL: str = Field("INFO", description="Root level for package loggers")
    LOG_DIR: str = Field("./data/logs", description="Directory for rotating log files")

    # Statutory defaults (Kenya, 2025)
    PERSONAL_RELIEF_MONTHLY: float = 2400.0

    # NSSF (Act 2013, Feb 2025 phase): 6% each side, capped
    NSSF_EMPLOYEE_RATE: float = 0.06
    NSSF_EMPLOYER_RATE: float = 0.06
    NSSF_MAX_CONTRIBUTION: float = 4320.0

    # SHIF replaced NHIF in Oct 2024; employee only
    SHIF_EMPLOYEE_RATE: float = 0.0275
    SHIF_EMPLOYER_RATE: float = 0.0

    # Affordable Housing Levy
    AHL_EMPLOYEE_RATE: float = 0.015
    AHL_EMPLOYER_RATE: float = 0.015

    # PAYE (Finance Act 2023), monthly upper bound per band, None = no upper bound
    PAYE_BANDS: List[Tuple[Optional[float], float]] = [
        (24000, 0.10),
        (32333, 0.25),
        (500000, 0.30),
        (800000, 0.325),
        (None, 0.35),
    ]

    DEFAULT_EFFECTIVE_FROM: str = "2025-01-01"
    MONEY_PLACES: int = 2

settings = Settings()
