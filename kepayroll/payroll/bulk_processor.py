"""
Payroll runs: apply the calculator to every employee for one pay period
and summarise the results.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from kepayroll.core.utils import month_name, parse_period, quantize_money, sum_decimals, to_decimal
from kepayroll.payroll.engine import EmployeeCompensationInput, PayrollBreakdown, PayrollCalculator
from kepayroll.reports.remittances import RemittanceTotals, aggregate_remittances
from kepayroll.tax.settings import PayrollSettings

logger = logging.getLogger(__name__)

ALLOWANCE_PREFIX = "allowance_"
DEDUCTION_PREFIX = "deduction_"
SCALAR_COLUMNS = ["basic_salary", "helb_amount", "bonuses", "overtime"]

@dataclass(frozen=True)
class PayrollRunLine:
    employee_id: Optional[str]
    name: str
    breakdown: PayrollBreakdown

@dataclass
class PayrollRunResult:
    period: str
    lines: List[PayrollRunLine] = field(default_factory=list)

    @property
    def breakdowns(self) -> List[PayrollBreakdown]:
        return [line.breakdown for line in self.lines]

    def negative_net(self) -> List[PayrollRunLine]:
        return [line for line in self.lines if line.breakdown.net_salary < 0]

    def remittances(self) -> RemittanceTotals:
        return aggregate_remittances(self.breakdowns, month=self.period)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for line in self.lines:
            row = {"employee_id": line.employee_id, "name": line.name, "payroll_period": self.period}
            row.update(line.breakdown.rounded().to_dict())
            rows.append(row)
        return pd.DataFrame(rows)

    def summary(self) -> Dict[str, Any]:
        """Totals and averages for the run, in the shape payroll screens use."""
        count = len(self.lines)
        if not count:
            return {"period": self.period, "period_name": month_name(self.period), "total_employees": 0}

        def total(name: str) -> Decimal:
            return sum_decimals(getattr(b, name) for b in self.breakdowns)

        totals = {
            "gross": total("gross_salary"),
            "paye": total("paye_after_relief"),
            "nssf": total("nssf_employee"),
            "shif": total("shif_employee"),
            "ahl": total("ahl_employee"),
            "helb": total("helb"),
            "voluntary": total("voluntary_deductions_total"),
            "deductions": total("total_deductions"),
            "net": total("net_salary"),
            "employer_cost": total("total_employer_cost"),
        }
        return {
            "period": self.period,
            "period_name": month_name(self.period),
            "total_employees": count,
            "totals": {k: quantize_money(v) for k, v in totals.items()},
            "averages": {
                "gross": quantize_money(totals["gross"] / count),
                "net": quantize_money(totals["net"] / count),
            },
            "negative_net_employees": [line.employee_id for line in self.negative_net()],
        }

class PayrollRunProcessor:
    """Runs the calculator over a set of employees with one settings snapshot."""

    def __init__(self, settings: PayrollSettings):
        self.settings = settings
        self.payroll_calculator = PayrollCalculator()

    def run(self, employees: Iterable[Mapping[str, Any]], period: str) -> PayrollRunResult:
        """
        Calculate payroll for every employee record.

        Args:
            employees: mappings with employee_id, name, basic_salary, allowances,
                voluntary_deductions, helb_amount, bonuses, overtime
            period: payroll period (YYYY-MM format)
        """
        parse_period(period)
        result = PayrollRunResult(period=period)
        for emp in employees:
            comp = EmployeeCompensationInput.from_dict(emp)
            breakdown = self.payroll_calculator.calculate(comp, self.settings)
            result.lines.append(PayrollRunLine(
                employee_id=comp.employee_id,
                name=emp.get("name") or "",
                breakdown=breakdown,
            ))

        flagged = result.negative_net()
        logger.info("Payroll run %s: %d employees processed", period, len(result.lines))
        if flagged:
            logger.warning(
                "Payroll run %s: %d employees with negative net pay: %s",
                period, len(flagged), ", ".join(str(line.employee_id) for line in flagged),
            )
        return result

    def run_frame(self, df: pd.DataFrame, period: str) -> PayrollRunResult:
        """Run payroll from a flat table (allowance_<name> / deduction_<name> columns)."""
        return self.run(frame_to_employees(df), period)

def frame_to_employees(df: pd.DataFrame) -> List[Dict[str, Any]]:
    df = df.copy()
    allowance_cols = [c for c in df.columns if c.startswith(ALLOWANCE_PREFIX)]
    deduction_cols = [c for c in df.columns if c.startswith(DEDUCTION_PREFIX)]

    # Ensure numeric fields are properly converted
    for col in SCALAR_COLUMNS + allowance_cols + deduction_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors='coerce').fillna(0)
        else:
            df[col] = 0

    if 'employee_id' in df.columns:
        df['employee_id'] = pd.Series(
            [str(v).strip().upper() if pd.notna(v) else None for v in df['employee_id']],
            index=df.index, dtype=object,
        )

    employees = []
    for rec in df.to_dict(orient="records"):
        employees.append({
            "employee_id": rec.get("employee_id"),
            "name": rec.get("name") or "",
            "basic_salary": to_decimal(rec["basic_salary"]),
            "helb_amount": to_decimal(rec["helb_amount"]),
            "bonuses": to_decimal(rec["bonuses"]),
            "overtime": to_decimal(rec["overtime"]),
            "allowances": {c[len(ALLOWANCE_PREFIX):]: to_decimal(rec[c]) for c in allowance_cols},
            "voluntary_deductions": {c[len(DEDUCTION_PREFIX):]: to_decimal(rec[c]) for c in deduction_cols},
        })
    return employees
