import logging
import os
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from kepayroll.core.config import settings

ZERO = Decimal("0")

def mkdir_safe(path: str):
    Path(path).mkdir(parents=True, exist_ok=True)

def _has_file_handler(logger: logging.Logger, logfile: Path) -> bool:
    target = str(logfile.resolve())
    return any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == target
        for h in logger.handlers
    )

def setup_logging(scope: str = "payroll", *, log_level: str = None) -> logging.Logger:
    """Route the package's log records to ``<LOG_DIR>/<scope>.log``.

    Handlers go on the top-level ``kepayroll`` logger, so every module logger
    (``kepayroll.payroll.engine`` and friends) writes through them. Calling
    again for the same file adds nothing.
    """
    logger = logging.getLogger(settings.APP_NAME)
    logger.setLevel(getattr(logging, (log_level or settings.LOG_LEVEL).upper()))
    mkdir_safe(settings.LOG_DIR)
    logfile = Path(settings.LOG_DIR) / f"{scope}.log"
    if _has_file_handler(logger, logfile):
        return logger

    formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    file_handler = RotatingFileHandler(str(logfile), maxBytes=10_000_000, backupCount=5)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    dev = os.getenv("DEV", "").lower() in ("1", "true", "yes")
    if dev and not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)
    return logger

def to_decimal(value: Any) -> Decimal:
    """Convert a numeric input to Decimal. None counts as zero.

    Floats go through ``str`` so that 0.0275 becomes Decimal("0.0275")
    rather than its binary expansion. numpy scalars (DataFrame cells) are
    unwrapped to plain Python numbers first.
    """
    if value is None:
        return ZERO
    if not isinstance(value, (Decimal, str)) and hasattr(value, "item"):
        value = value.item()
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)

def sum_amounts(values: Optional[Mapping[str, Any]]) -> Decimal:
    """Sum an open-ended category mapping, treating missing/None entries as 0."""
    if not values:
        return ZERO
    return sum((to_decimal(v) for v in values.values()), ZERO)

def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)

def quantize_money(amount: Decimal, places: int = None) -> Decimal:
    places = settings.MONEY_PLACES if places is None else places
    exp = Decimal(1).scaleb(-places)
    return to_decimal(amount).quantize(exp, rounding=ROUND_HALF_UP)

def format_currency(amount: Any) -> str:
    value = quantize_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}KES {abs(value):,.{settings.MONEY_PLACES}f}"

def parse_period(period: str) -> date:
    """Parse a ``YYYY-MM`` pay period into the first day of that month."""
    try:
        year_s, month_s = period.strip().split("-")
        return date(int(year_s), int(month_s), 1)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid payroll period {period!r}, expected YYYY-MM") from e

def month_name(period: str) -> str:
    return parse_period(period).strftime("%B %Y")
