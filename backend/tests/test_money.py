from decimal import Decimal

import pytest

from coinledger.errors import ValidationError
from coinledger.money import quantize_storage, require_non_negative, require_positive, require_storable, to_decimal


def test_to_decimal_accepts_strings_ints_and_floats():
    assert to_decimal("1.25") == Decimal("1.25")
    assert to_decimal(3) == Decimal("3")
    assert to_decimal(0.1) == Decimal("0.1")


@pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", True])
def test_to_decimal_rejects_non_numbers(raw):
    with pytest.raises(ValidationError) as excinfo:
        to_decimal(raw, field="price")
    assert excinfo.value.field == "price"


def test_quantize_storage_rounds_half_up_to_eighteen_places():
    assert quantize_storage(Decimal("0.0000000000000000005")) == Decimal("0.000000000000000001")
    assert quantize_storage(Decimal("0.0000000000000000004")) == Decimal("0")
    assert quantize_storage(Decimal("12345678901234567890.123")) == Decimal("12345678901234567890.123")


def test_sign_checks():
    assert require_positive(Decimal("0.01"), "amount") == Decimal("0.01")
    with pytest.raises(ValidationError):
        require_positive(Decimal("0"), "amount")
    assert require_non_negative(Decimal("0"), "fee") == Decimal("0")
    with pytest.raises(ValidationError):
        require_non_negative(Decimal("-1"), "fee")


def test_storage_range_is_twenty_integer_digits():
    assert require_storable(Decimal("99999999999999999999.5"), "total") == Decimal("99999999999999999999.5")
    assert require_storable(Decimal("0"), "total") == Decimal("0")
    with pytest.raises(ValidationError) as excinfo:
        require_storable(Decimal("1E20"), "total")
    assert excinfo.value.field == "total"
    with pytest.raises(ValidationError):
        quantize_storage(Decimal("-1E24"))
