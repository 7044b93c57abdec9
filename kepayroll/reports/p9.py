"""
P9 annual tax-deduction totals for a single employee.
"""
from dataclasses import dataclass, asdict, fields
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from kepayroll.core.utils import ZERO, quantize_money
from kepayroll.payroll.engine import PayrollBreakdown
from kepayroll.reports.due_dates import annual_return_due_date

MONTHS_IN_YEAR = 12

# P9 total -> breakdown field it accumulates
P9_FIELDS = {
    "gross_salary_total": "gross_salary",
    "basic_salary_total": "basic_salary",
    "allowances_total": "allowances_total",
    "nssf_employee_total": "nssf_employee",
    "nssf_employer_total": "nssf_employer",
    "shif_employee_total": "shif_employee",
    "shif_employer_total": "shif_employer",
    "ahl_employee_total": "ahl_employee",
    "ahl_employer_total": "ahl_employer",
    "helb_total": "helb",
    "voluntary_deductions_total": "voluntary_deductions_total",
    "paye_total": "paye_after_relief",
    "net_salary_total": "net_salary",
    "total_employer_cost": "total_employer_cost",
}

@dataclass(frozen=True)
class P9Totals:
    year: int
    months: int
    gross_salary_total: Decimal
    basic_salary_total: Decimal
    allowances_total: Decimal
    nssf_employee_total: Decimal
    nssf_employer_total: Decimal
    shif_employee_total: Decimal
    shif_employer_total: Decimal
    ahl_employee_total: Decimal
    ahl_employer_total: Decimal
    helb_total: Decimal
    voluntary_deductions_total: Decimal
    paye_total: Decimal
    net_salary_total: Decimal
    total_employer_cost: Decimal
    employee_id: Optional[str] = None

    @property
    def total_deductions(self) -> Decimal:
        return self.nssf_employee_total + self.shif_employee_total + self.ahl_employee_total + self.paye_total

    def monthly_average(self, name: str) -> Decimal:
        if self.months == 0:
            return ZERO
        return getattr(self, name) / self.months

    def due_date(self, today=None):
        return annual_return_due_date(self.year, today)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for f in fields(self):
            if f.name not in P9_FIELDS:
                continue
            total = getattr(self, f.name)
            rows.append({
                "item": f.name,
                "annual": quantize_money(total),
                "monthly_average": quantize_money(self.monthly_average(f.name)),
            })
        return pd.DataFrame(rows)

def aggregate_p9(monthly_breakdowns: Iterable[PayrollBreakdown], year: int, employee_id: Optional[str] = None) -> P9Totals:
    totals = {name: ZERO for name in P9_FIELDS}
    months = 0
    for b in monthly_breakdowns:
        months += 1
        for name, source in P9_FIELDS.items():
            totals[name] += getattr(b, source)
    if months > MONTHS_IN_YEAR:
        raise ValueError(f"P9 for {year} covers {months} months, at most {MONTHS_IN_YEAR} allowed")
    return P9Totals(year=year, months=months, employee_id=employee_id, **totals)

def project_p9(breakdown: PayrollBreakdown, year: int, months: int = MONTHS_IN_YEAR, employee_id: Optional[str] = None) -> P9Totals:
    """Annualise a single monthly breakdown by repeating it ``months`` times."""
    if not 0 <= months <= MONTHS_IN_YEAR:
        raise ValueError(f"months must be between 0 and {MONTHS_IN_YEAR}, got {months}")
    factor = Decimal(months)
    totals = {name: getattr(breakdown, source) * factor for name, source in P9_FIELDS.items()}
    return P9Totals(year=year, months=months, employee_id=employee_id, **totals)
