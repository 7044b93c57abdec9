from decimal import Decimal

from kepayroll.tax.brackets import ProgressiveTaxEngine, TaxBracket, apply, brackets_from_bands

BANDS = [(24000, 0.10), (32333, 0.25), (500000, 0.30), (800000, 0.325), (None, 0.35)]

def test_brackets_from_bands_are_contiguous():
    brackets = brackets_from_bands(BANDS)
    assert [b.min for b in brackets] == [0, 24001, 32334, 500001, 800001]
    assert brackets[-1].max is None
    assert brackets[1].width() == Decimal("8333")
    assert brackets[0].width() == Decimal("24000")

def test_first_band_only():
    assert apply(20000, brackets_from_bands(BANDS)) == Decimal("2000")

def test_two_bands():
    brackets = [TaxBracket(0, 24000, "0.10"), TaxBracket(24001, None, "0.25")]
    assert apply(Decimal("45625"), brackets) == Decimal("7806.25")

def test_all_kenyan_bands():
    tax = apply(1000000, brackets_from_bands(BANDS))
    expected = (
        Decimal("24000") * Decimal("0.10")
        + Decimal("8333") * Decimal("0.25")
        + Decimal("467667") * Decimal("0.30")
        + Decimal("300000") * Decimal("0.325")
        + Decimal("200000") * Decimal("0.35")
    )
    assert tax == expected

def test_zero_and_negative_income():
    brackets = brackets_from_bands(BANDS)
    assert apply(0, brackets) == 0
    assert apply(-5000, brackets) == 0

def test_monotonic_in_income():
    engine = ProgressiveTaxEngine(brackets_from_bands(BANDS))
    previous = Decimal("0")
    for income in range(0, 1_200_000, 7919):
        tax = engine.compute(income)
        assert tax >= previous
        previous = tax

def test_bracket_order_matters():
    brackets = [TaxBracket(0, 24000, "0.10"), TaxBracket(24001, None, "0.25")]
    assert apply(30000, brackets) != apply(30000, list(reversed(brackets)))

def test_static_apply_matches_function():
    brackets = brackets_from_bands(BANDS)
    assert ProgressiveTaxEngine.apply(150000, brackets) == apply(150000, brackets)
