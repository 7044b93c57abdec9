"""
Payroll settings snapshots and their load-time validation.

``PayrollSettings`` is what the calculator consumes. It is built either from
a raw mapping (a settings row, a JSON body) through ``PayrollSettingsSchema``
or from the application defaults in ``kepayroll.core.config``. Validation
happens once here, never per calculation.
"""
from dataclasses import dataclass, field, asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from kepayroll.core.config import settings as app_settings
from kepayroll.core.utils import to_decimal
from kepayroll.tax.brackets import TaxBracket, brackets_from_bands

RATE_FIELDS = (
    "nssf_employee_rate",
    "nssf_employer_rate",
    "shif_employee_rate",
    "shif_employer_rate",
    "ahl_employee_rate",
    "ahl_employer_rate",
)
AMOUNT_FIELDS = RATE_FIELDS + ("personal_relief", "nssf_max_contribution")

class SettingsValidationError(ValueError):
    """Raised when a settings snapshot fails load-time validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid payroll settings: " + "; ".join(self.errors))

@dataclass(frozen=True)
class PayrollSettings:
    personal_relief: Decimal
    nssf_employee_rate: Decimal
    nssf_employer_rate: Decimal
    nssf_max_contribution: Decimal
    shif_employee_rate: Decimal
    shif_employer_rate: Decimal
    ahl_employee_rate: Decimal
    ahl_employer_rate: Decimal
    paye_brackets: Tuple[TaxBracket, ...]
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    version_label: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        for name in AMOUNT_FIELDS:
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        object.__setattr__(
            self, "paye_brackets", tuple(TaxBracket.from_dict(b) for b in self.paye_brackets)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PayrollSettings":
        """Validate a raw settings mapping and build a snapshot from it."""
        try:
            schema = PayrollSettingsSchema.model_validate(dict(data))
        except ValidationError as e:
            raise SettingsValidationError(
                [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            ) from e
        snapshot = schema.to_settings()
        validate_settings(snapshot)
        return snapshot

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["paye_brackets"] = [b.to_dict() for b in self.paye_brackets]
        return data

class TaxBracketSchema(BaseModel):
    min: Decimal = Field(ge=0)
    max: Optional[Decimal] = None
    rate: Decimal = Field(ge=0, le=1)

class PayrollSettingsSchema(BaseModel):
    personal_relief: Decimal = Field(ge=0)
    nssf_employee_rate: Decimal = Field(ge=0, le=1)
    nssf_employer_rate: Decimal = Field(ge=0, le=1)
    nssf_max_contribution: Decimal = Field(ge=0)
    shif_employee_rate: Decimal = Field(ge=0, le=1)
    shif_employer_rate: Decimal = Field(0, ge=0, le=1)
    ahl_employee_rate: Decimal = Field(ge=0, le=1)
    ahl_employer_rate: Decimal = Field(ge=0, le=1)
    paye_brackets: List[TaxBracketSchema] = Field(min_length=1)
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    version_label: Optional[str] = None

    @field_validator("effective_from", "effective_to", mode="before")
    @classmethod
    def _strip_time(cls, v):
        # ISO timestamps from settings rows carry a time part
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    def to_settings(self) -> PayrollSettings:
        return PayrollSettings(
            personal_relief=self.personal_relief,
            nssf_employee_rate=self.nssf_employee_rate,
            nssf_employer_rate=self.nssf_employer_rate,
            nssf_max_contribution=self.nssf_max_contribution,
            shif_employee_rate=self.shif_employee_rate,
            shif_employer_rate=self.shif_employer_rate,
            ahl_employee_rate=self.ahl_employee_rate,
            ahl_employer_rate=self.ahl_employer_rate,
            paye_brackets=tuple(TaxBracket(b.min, b.max, b.rate) for b in self.paye_brackets),
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            version_label=self.version_label,
        )

def bracket_errors(brackets) -> List[str]:
    errors = []
    if not brackets:
        return ["paye_brackets: at least one bracket is required"]
    for i, b in enumerate(brackets):
        if not (0 <= b.rate <= 1):
            errors.append(f"paye_brackets[{i}]: rate {b.rate} outside [0, 1]")
        if b.max is not None and b.max < b.min:
            errors.append(f"paye_brackets[{i}]: max {b.max} below min {b.min}")
        if b.max is None and i != len(brackets) - 1:
            errors.append(f"paye_brackets[{i}]: only the last bracket may be unbounded")
    if brackets[0].min != 0:
        errors.append(f"paye_brackets[0]: must start at 0, got {brackets[0].min}")
    for i in range(1, len(brackets)):
        prev, cur = brackets[i - 1], brackets[i]
        if cur.min <= prev.min:
            errors.append(f"paye_brackets[{i}]: not ascending by min")
        elif prev.max is not None and cur.min != prev.max + 1:
            errors.append(
                f"paye_brackets[{i}]: min {cur.min} does not follow previous max {prev.max}"
            )
    if brackets[-1].max is not None:
        errors.append("paye_brackets: last bracket must be unbounded")
    return errors

def validate_settings(snapshot: PayrollSettings) -> PayrollSettings:
    """Check rates, caps, bracket layout and dates. Returns the snapshot unchanged."""
    errors = []
    for name in RATE_FIELDS:
        rate = getattr(snapshot, name)
        if not (0 <= rate <= 1):
            errors.append(f"{name}: {rate} outside [0, 1]")
    if snapshot.personal_relief < 0:
        errors.append("personal_relief: must be non-negative")
    if snapshot.nssf_max_contribution < 0:
        errors.append("nssf_max_contribution: must be non-negative")
    errors.extend(bracket_errors(snapshot.paye_brackets))
    if (
        snapshot.effective_from is not None
        and snapshot.effective_to is not None
        and snapshot.effective_to < snapshot.effective_from
    ):
        errors.append("effective_to: before effective_from")
    if errors:
        raise SettingsValidationError(errors)
    return snapshot

def default_settings(effective_from: Optional[date] = None) -> PayrollSettings:
    """Statutory defaults from application config (Kenya 2025)."""
    return PayrollSettings(
        personal_relief=to_decimal(app_settings.PERSONAL_RELIEF_MONTHLY),
        nssf_employee_rate=to_decimal(app_settings.NSSF_EMPLOYEE_RATE),
        nssf_employer_rate=to_decimal(app_settings.NSSF_EMPLOYER_RATE),
        nssf_max_contribution=to_decimal(app_settings.NSSF_MAX_CONTRIBUTION),
        shif_employee_rate=to_decimal(app_settings.SHIF_EMPLOYEE_RATE),
        shif_employer_rate=to_decimal(app_settings.SHIF_EMPLOYER_RATE),
        ahl_employee_rate=to_decimal(app_settings.AHL_EMPLOYEE_RATE),
        ahl_employer_rate=to_decimal(app_settings.AHL_EMPLOYER_RATE),
        paye_brackets=tuple(brackets_from_bands(app_settings.PAYE_BANDS)),
        effective_from=effective_from or date.fromisoformat(app_settings.DEFAULT_EFFECTIVE_FROM),
    )
