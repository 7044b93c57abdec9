from datetime import date
from decimal import Decimal

import pytest

from kepayroll.payroll.engine import EmployeeCompensationInput, calculate
from kepayroll.reports.due_dates import (
    REMITTANCE_TYPES,
    annual_return_due_date,
    monthly_remittance_due_date,
)
from kepayroll.reports.p9 import aggregate_p9, project_p9
from kepayroll.reports.remittances import aggregate_remittances

def _slip(settings, basic, **kw):
    return calculate(EmployeeCompensationInput(basic_salary=Decimal(basic), **kw), settings)

def test_remittance_totals(kenya_settings):
    slips = [_slip(kenya_settings, 50000), _slip(kenya_settings, 100000)]
    totals = aggregate_remittances(slips, month="2025-01")
    assert totals.employee_count == 2
    assert totals.nssf_employee == Decimal("3000") + Decimal("4320")
    assert totals.nssf_total == totals.nssf_employee + totals.nssf_employer
    assert totals.shif_total == totals.shif_employee
    assert totals.ahl_total == Decimal("2250") * 2
    assert totals.paye_total == slips[0].paye_after_relief + slips[1].paye_after_relief
    assert totals.total_gross == Decimal("150000")

def test_remittance_by_agency(kenya_settings):
    totals = aggregate_remittances([_slip(kenya_settings, 50000)], month="2025-01")
    rows = totals.by_agency(today=date(2025, 2, 1))
    assert [r["remittance"] for r in rows] == ["PAYE", "NSSF", "SHIF", "AHL"]
    assert all(r["due_date"] == date(2025, 2, 9) for r in rows)
    assert rows[1]["amount"] == Decimal("6000.00")
    assert len(totals.to_dataframe(today=date(2025, 2, 1))) == 4

def test_empty_remittances():
    totals = aggregate_remittances([])
    assert totals.employee_count == 0
    assert totals.statutory_total == 0

def test_p9_sum_of_months(kenya_settings):
    months = [_slip(kenya_settings, 50000) for _ in range(11)] + [_slip(kenya_settings, 50000, bonuses=Decimal("20000"))]
    p9 = aggregate_p9(months, 2024, employee_id="EMP001")
    assert p9.months == 12
    assert p9.basic_salary_total == Decimal("600000")
    assert p9.gross_salary_total == Decimal("620000")
    assert p9.paye_total == sum(m.paye_after_relief for m in months)
    assert p9.total_deductions == (
        p9.nssf_employee_total + p9.shif_employee_total + p9.ahl_employee_total + p9.paye_total
    )
    assert p9.due_date(today=date(2025, 1, 1)).due_date == date(2025, 2, 28)

def test_p9_projection_matches_sum(kenya_settings):
    slip = _slip(kenya_settings, 75000, allowances={"housing": 5000})
    assert project_p9(slip, 2025) == aggregate_p9([slip] * 12, 2025)
    assert project_p9(slip, 2025).monthly_average("net_salary_total") == slip.net_salary

def test_p9_too_many_months(kenya_settings):
    with pytest.raises(ValueError):
        aggregate_p9([_slip(kenya_settings, 1000)] * 13, 2025)

def test_p9_dataframe(kenya_settings):
    df = project_p9(_slip(kenya_settings, 60000), 2025).to_dataframe()
    assert "paye_total" in set(df["item"])

def test_monthly_due_date_rolls_year():
    info = monthly_remittance_due_date("2024-12", today=date(2025, 1, 5))
    assert info.due_date == date(2025, 1, 9)
    assert info.days_remaining == 4
    assert info.is_due_soon and not info.is_overdue
    assert info.message() == "Due in 4 days"
    assert info.formatted == "9 January 2025"

def test_monthly_due_date_overdue():
    info = monthly_remittance_due_date("2025-03", today=date(2025, 4, 10))
    assert info.is_overdue
    assert info.message() == "Overdue by 1 day"

def test_annual_due_date_leap_year():
    assert annual_return_due_date(2023, today=date(2023, 6, 1)).due_date == date(2024, 2, 29)
    info = annual_return_due_date(2024, today=date(2025, 2, 1))
    assert info.due_date == date(2025, 2, 28)
    assert info.is_due_soon

def test_remittance_types():
    assert [t["name"] for t in REMITTANCE_TYPES] == ["PAYE", "NSSF", "SHIF", "AHL"]
