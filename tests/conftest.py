import pytest

from kepayroll.tax.brackets import TaxBracket
from kepayroll.tax.settings import PayrollSettings, default_settings

@pytest.fixture
def two_band_settings():
    return PayrollSettings(
        personal_relief=2400,
        nssf_employee_rate="0.06",
        nssf_employer_rate="0.06",
        nssf_max_contribution=4320,
        shif_employee_rate="0.0275",
        shif_employer_rate=0,
        ahl_employee_rate="0.015",
        ahl_employer_rate="0.015",
        paye_brackets=(
            TaxBracket(0, 24000, "0.10"),
            TaxBracket(24001, None, "0.25"),
        ),
    )

@pytest.fixture
def kenya_settings():
    return default_settings()
