"""
KRA remittance deadlines.

- Monthly PAYE, NSSF, SHIF, AHL: 9th of the following month
- Annual P9/P10 returns: last day of February after the tax year
"""
import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional

from kepayroll.core.utils import parse_period

MONTHLY_DUE_DAY = 9
MONTHLY_DUE_SOON_DAYS = 7
ANNUAL_DUE_SOON_DAYS = 30

REMITTANCE_TYPES = [
    {"name": "PAYE", "description": "Pay As You Earn Tax", "due_date": "9th of following month"},
    {"name": "NSSF", "description": "National Social Security Fund", "due_date": "9th of following month"},
    {"name": "SHIF", "description": "Social Health Insurance Fund (formerly NHIF)", "due_date": "9th of following month"},
    {"name": "AHL", "description": "Affordable Housing Levy", "due_date": "9th of following month"},
]

@dataclass(frozen=True)
class DueDateInfo:
    due_date: date
    days_remaining: int
    is_overdue: bool
    is_due_soon: bool

    @property
    def formatted(self) -> str:
        return f"{self.due_date.day} {self.due_date.strftime('%B %Y')}"

    def message(self) -> str:
        days = abs(self.days_remaining)
        plural = "s" if days != 1 else ""
        if self.is_overdue:
            return f"Overdue by {days} day{plural}"
        return f"Due in {days} day{plural}"

def _info(due: date, today: Optional[date], soon_days: int) -> DueDateInfo:
    today = today or date.today()
    days_remaining = (due - today).days
    return DueDateInfo(
        due_date=due,
        days_remaining=days_remaining,
        is_overdue=days_remaining < 0,
        is_due_soon=0 <= days_remaining <= soon_days,
    )

def monthly_remittance_due_date(month: str, today: Optional[date] = None) -> DueDateInfo:
    period = parse_period(month)
    if period.month == 12:
        due = date(period.year + 1, 1, MONTHLY_DUE_DAY)
    else:
        due = date(period.year, period.month + 1, MONTHLY_DUE_DAY)
    return _info(due, today, MONTHLY_DUE_SOON_DAYS)

def annual_return_due_date(tax_year: int, today: Optional[date] = None) -> DueDateInfo:
    due_year = tax_year + 1
    last_day = calendar.monthrange(due_year, 2)[1]
    return _info(date(due_year, 2, last_day), today, ANNUAL_DUE_SOON_DAYS)
