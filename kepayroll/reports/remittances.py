"""
Monthly statutory remittance totals across all employees.
"""
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from kepayroll.core.utils import ZERO, quantize_money
from kepayroll.payroll.engine import PayrollBreakdown
from kepayroll.reports.due_dates import monthly_remittance_due_date

@dataclass(frozen=True)
class RemittanceTotals:
    month: Optional[str]
    employee_count: int
    nssf_employee: Decimal
    nssf_employer: Decimal
    shif_employee: Decimal
    shif_employer: Decimal
    ahl_employee: Decimal
    ahl_employer: Decimal
    paye_total: Decimal
    total_gross: Decimal
    total_net_payroll: Decimal
    total_employer_cost: Decimal

    @property
    def nssf_total(self) -> Decimal:
        return self.nssf_employee + self.nssf_employer

    @property
    def shif_total(self) -> Decimal:
        return self.shif_employee + self.shif_employer

    @property
    def ahl_total(self) -> Decimal:
        return self.ahl_employee + self.ahl_employer

    @property
    def statutory_total(self) -> Decimal:
        return self.paye_total + self.nssf_total + self.shif_total + self.ahl_total

    def by_agency(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        due = monthly_remittance_due_date(self.month, today) if self.month else None
        rows = [
            ("KRA", "PAYE", self.paye_total),
            ("NSSF", "NSSF", self.nssf_total),
            ("SHA", "SHIF", self.shif_total),
            ("KRA", "AHL", self.ahl_total),
        ]
        return [
            {
                "agency": agency,
                "remittance": name,
                "amount": quantize_money(amount),
                "due_date": due.due_date if due else None,
                "is_overdue": due.is_overdue if due else None,
            }
            for agency, name, amount in rows
        ]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(nssf_total=self.nssf_total, shif_total=self.shif_total, ahl_total=self.ahl_total)
        return data

    def to_dataframe(self, today: Optional[date] = None) -> pd.DataFrame:
        return pd.DataFrame(self.by_agency(today))

def aggregate_remittances(breakdowns: Iterable[PayrollBreakdown], month: Optional[str] = None) -> RemittanceTotals:
    totals = dict(
        nssf_employee=ZERO, nssf_employer=ZERO,
        shif_employee=ZERO, shif_employer=ZERO,
        ahl_employee=ZERO, ahl_employer=ZERO,
        paye_total=ZERO, total_gross=ZERO,
        total_net_payroll=ZERO, total_employer_cost=ZERO,
    )
    count = 0
    for b in breakdowns:
        count += 1
        totals["nssf_employee"] += b.nssf_employee
        totals["nssf_employer"] += b.nssf_employer
        totals["shif_employee"] += b.shif_employee
        totals["shif_employer"] += b.shif_employer
        totals["ahl_employee"] += b.ahl_employee
        totals["ahl_employer"] += b.ahl_employer
        totals["paye_total"] += b.paye_after_relief
        totals["total_gross"] += b.gross_salary
        totals["total_net_payroll"] += b.net_salary
        totals["total_employer_cost"] += b.total_employer_cost
    return RemittanceTotals(month=month, employee_count=count, **totals)
