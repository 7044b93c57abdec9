from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from kepayroll.tax.config_manager import PayrollSettingsRegistry, SettingsNotFoundError
from kepayroll.tax.settings import SettingsValidationError, default_settings

def test_versions_by_effective_date():
    v2024 = replace(default_settings(date(2024, 1, 1)), shif_employee_rate=Decimal("0"))
    v2025 = default_settings(date(2025, 1, 1))
    reg = PayrollSettingsRegistry([v2024, v2025])
    assert reg.get_active(date(2024, 6, 1)).shif_employee_rate == 0
    assert reg.get_active(date(2025, 3, 1)).shif_employee_rate == Decimal("0.0275")
    assert reg.history()[0].effective_to == date(2024, 12, 31)
    assert reg.history()[1].effective_to is None

def test_publishing_out_of_order_bounds_new_version():
    reg = PayrollSettingsRegistry()
    reg.publish(default_settings(date(2025, 1, 1)))
    older = reg.publish(default_settings(date(2024, 1, 1)))
    assert older.effective_to == date(2024, 12, 31)
    assert reg.get_active(date(2025, 1, 1)).effective_from == date(2025, 1, 1)

def test_same_start_date_replaces():
    reg = PayrollSettingsRegistry.with_defaults()
    start = reg.history()[0].effective_from
    reg.publish(replace(default_settings(start), personal_relief=Decimal("2500")))
    assert len(reg) == 1
    assert reg.get_active(start).personal_relief == Decimal("2500")

def test_no_version_before_first():
    reg = PayrollSettingsRegistry([default_settings(date(2025, 1, 1))])
    with pytest.raises(SettingsNotFoundError):
        reg.get_active(date(2024, 12, 31))

def test_publish_validates():
    reg = PayrollSettingsRegistry()
    bad = replace(default_settings(), nssf_employee_rate=Decimal("6"))
    with pytest.raises(SettingsValidationError):
        reg.publish(bad)
    assert len(reg) == 0

def test_publish_from_mapping():
    reg = PayrollSettingsRegistry()
    row = default_settings(date(2025, 2, 1)).to_dict()
    snapshot = reg.publish(row)
    assert reg.get_active(date(2025, 2, 15)) == snapshot
