"""
Gross-to-net calculation for one employee and one pay period.

The calculator is a pure function of its inputs: it does no rounding,
no validation and never clamps net pay. Negative net salary (an
over-deducted employee) is returned as computed.
"""
import logging
from dataclasses import dataclass, asdict, field, fields, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from kepayroll.core.utils import ZERO, quantize_money, sum_amounts, to_decimal
from kepayroll.tax import brackets as tax_brackets
from kepayroll.tax.settings import PayrollSettings

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class EmployeeCompensationInput:
    """Raw compensation for one pay period.

    ``allowances`` and ``voluntary_deductions`` are open-ended category
    maps (housing, transport, insurance, loans, ...); missing or None
    entries count as zero.
    """
    basic_salary: Decimal
    allowances: Mapping[str, Any] = field(default_factory=dict)
    voluntary_deductions: Mapping[str, Any] = field(default_factory=dict)
    helb_amount: Decimal = ZERO
    bonuses: Decimal = ZERO
    overtime: Decimal = ZERO
    employee_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmployeeCompensationInput":
        return cls(
            basic_salary=to_decimal(data.get("basic_salary")),
            allowances=dict(data.get("allowances") or {}),
            voluntary_deductions=dict(data.get("voluntary_deductions") or {}),
            helb_amount=to_decimal(data.get("helb_amount")),
            bonuses=to_decimal(data.get("bonuses")),
            overtime=to_decimal(data.get("overtime")),
            employee_id=data.get("employee_id"),
        )

@dataclass(frozen=True)
class PayrollBreakdown:
    gross_salary: Decimal
    basic_salary: Decimal
    allowances_total: Decimal
    overtime: Decimal
    bonuses: Decimal
    nssf_employee: Decimal
    nssf_employer: Decimal
    shif_employee: Decimal
    shif_employer: Decimal
    ahl_employee: Decimal
    ahl_employer: Decimal
    helb: Decimal
    voluntary_deductions_total: Decimal
    taxable_income: Decimal
    paye_before_relief: Decimal
    personal_relief: Decimal
    paye_after_relief: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    total_employer_cost: Decimal

    def rounded(self, places: int = None) -> "PayrollBreakdown":
        """Copy with every amount quantized to cents, for payslips and exports."""
        return replace(self, **{f.name: quantize_money(getattr(self, f.name), places) for f in fields(self)})

    def to_dict(self) -> Dict[str, Decimal]:
        return asdict(self)

def calculate(employee: EmployeeCompensationInput, settings: PayrollSettings) -> PayrollBreakdown:
    basic_salary = to_decimal(employee.basic_salary)
    bonuses = to_decimal(employee.bonuses)
    overtime = to_decimal(employee.overtime)

    allowances_total = sum_amounts(employee.allowances)
    voluntary_deductions_total = sum_amounts(employee.voluntary_deductions)

    gross_salary = basic_salary + allowances_total + bonuses + overtime

    # NSSF: same cap on both sides
    nssf_employee = min(gross_salary * settings.nssf_employee_rate, settings.nssf_max_contribution)
    nssf_employer = min(gross_salary * settings.nssf_employer_rate, settings.nssf_max_contribution)

    shif_employee = gross_salary * settings.shif_employee_rate
    shif_employer = gross_salary * settings.shif_employer_rate

    ahl_employee = gross_salary * settings.ahl_employee_rate
    ahl_employer = gross_salary * settings.ahl_employer_rate

    helb = to_decimal(employee.helb_amount)

    # AHL and employer contributions are not deductible
    taxable_income = gross_salary - nssf_employee - shif_employee

    paye_before_relief = tax_brackets.apply(taxable_income, settings.paye_brackets)
    personal_relief = settings.personal_relief
    paye_after_relief = max(paye_before_relief - personal_relief, ZERO)

    total_deductions = (
        nssf_employee
        + shif_employee
        + ahl_employee
        + helb
        + voluntary_deductions_total
        + paye_after_relief
    )
    net_salary = gross_salary - total_deductions
    total_employer_cost = gross_salary + nssf_employer + shif_employer + ahl_employer

    if net_salary < 0:
        logger.warning(
            "Negative net salary %s for employee %s (deductions %s exceed gross %s)",
            net_salary, employee.employee_id, total_deductions, gross_salary,
        )
    logger.debug("Calculated payroll for %s: gross=%s net=%s", employee.employee_id, gross_salary, net_salary)

    return PayrollBreakdown(
        gross_salary=gross_salary,
        basic_salary=basic_salary,
        allowances_total=allowances_total,
        overtime=overtime,
        bonuses=bonuses,
        nssf_employee=nssf_employee,
        nssf_employer=nssf_employer,
        shif_employee=shif_employee,
        shif_employer=shif_employer,
        ahl_employee=ahl_employee,
        ahl_employer=ahl_employer,
        helb=helb,
        voluntary_deductions_total=voluntary_deductions_total,
        taxable_income=taxable_income,
        paye_before_relief=paye_before_relief,
        personal_relief=personal_relief,
        paye_after_relief=paye_after_relief,
        total_deductions=total_deductions,
        net_salary=net_salary,
        total_employer_cost=total_employer_cost,
    )

class PayrollCalculator:
    """Stateless wrapper kept for callers that hold a calculator object."""

    def calculate(self, employee: EmployeeCompensationInput, settings: PayrollSettings) -> PayrollBreakdown:
        return calculate(employee, settings)

    def calculate_from_dict(self, data: Mapping[str, Any], settings: PayrollSettings) -> PayrollBreakdown:
        return calculate(EmployeeCompensationInput.from_dict(data), settings)
