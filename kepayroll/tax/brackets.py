"""
Progressive PAYE bands.

Bands are inclusive whole-shilling ranges, e.g. 0-24,000 then 24,001-32,333.
A band starting at 0 covers ``max`` shillings, any later band covers
``max - min + 1``. The last band has no upper bound (``max is None``).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from kepayroll.core.utils import ZERO, to_decimal

ONE = Decimal("1")

@dataclass(frozen=True)
class TaxBracket:
    min: Decimal
    max: Optional[Decimal]
    rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, "min", to_decimal(self.min))
        if self.max is not None:
            object.__setattr__(self, "max", to_decimal(self.max))
        object.__setattr__(self, "rate", to_decimal(self.rate))

    def width(self) -> Optional[Decimal]:
        if self.max is None:
            return None
        return self.max - max(self.min - ONE, ZERO)

    @classmethod
    def from_dict(cls, data: Any) -> "TaxBracket":
        if isinstance(data, TaxBracket):
            return data
        return cls(min=data.get("min") or 0, max=data.get("max"), rate=data.get("rate") or 0)

    def to_dict(self):
        return {"min": self.min, "max": self.max, "rate": self.rate}

def brackets_from_bands(bands: Iterable[Sequence[Any]]) -> List[TaxBracket]:
    """Build contiguous brackets from ``(upper_or_None, rate)`` band pairs."""
    brackets = []
    lower = ZERO
    for upper, rate in bands:
        bracket = TaxBracket(lower, upper, rate)
        brackets.append(bracket)
        if bracket.max is None:
            break
        lower = bracket.max + ONE
    return brackets

def apply(taxable_income: Any, brackets: Iterable[TaxBracket]) -> Decimal:
    """Pre-relief PAYE for ``taxable_income``.

    Brackets are walked in the order given; they are neither sorted nor
    validated here.
    """
    remaining = to_decimal(taxable_income)
    tax = ZERO
    for bracket in brackets:
        if remaining <= 0:
            break
        width = bracket.width()
        taxable_in_bracket = remaining if width is None else min(remaining, width)
        tax += taxable_in_bracket * bracket.rate
        remaining -= taxable_in_bracket
    return tax

class ProgressiveTaxEngine:
    """Marginal-rate accumulation over a fixed set of brackets."""

    def __init__(self, brackets: Iterable[TaxBracket]):
        self.brackets = tuple(brackets)

    def compute(self, taxable_income: Any) -> Decimal:
        return apply(taxable_income, self.brackets)

    @staticmethod
    def apply(taxable_income: Any, brackets: Iterable[TaxBracket]) -> Decimal:
        return apply(taxable_income, brackets)
