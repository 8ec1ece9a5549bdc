import math

import pytest

from checkout_backend.errors import EmptyCartError, UnknownSkuError
from checkout_backend.payments.cart import coerce_quantity, normalize_cart, split_sku


def test_split_sku_with_variant_uppercases_variant():
    assert split_sku("TEE-BLK--l") == ("TEE-BLK", "L")


def test_split_sku_without_variant():
    assert split_sku("HOOD-BLK") == ("HOOD-BLK", "")


def test_split_sku_splits_on_first_delimiter_only():
    # Le reste (même avec "--") forme la variante
    assert split_sku("TEE-BLK--xl--tall") == ("TEE-BLK", "XL--TALL")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (-5, 1),
        (0, 1),
        ("abc", 1),
        (None, 1),
        (True, 1),
        (math.nan, 1),
        ("inf", 1),
        (150, 99),
        ("2.7", 2),
        ("3", 3),
        (42, 42),
        (10 ** 400, 99),
        (-(10 ** 400), 1),
        ("9" * 400, 99),
        (" 7 ", 7),
    ],
)
def test_coerce_quantity_is_clamped(raw, expected):
    assert coerce_quantity(raw) == expected


def test_normalize_cart_variant_sku(catalog):
    # Arrange
    items = [{"sku": "TEE-BLK--L", "qty": 2}]
    # Act
    lines = normalize_cart(items, catalog)
    # Assert
    assert len(lines) == 1
    assert lines[0].base_sku == "TEE-BLK"
    assert lines[0].variant == "L"
    assert lines[0].quantity == 2


def test_normalize_cart_clamps_each_line(catalog):
    lines = normalize_cart(
        [{"sku": "TEE-BLK", "qty": -3}, {"sku": "HOOD-BLK", "qty": 500}, {"sku": "CAP-LOGO"}],
        catalog,
    )
    assert [li.quantity for li in lines] == [1, 99, 1]


@pytest.mark.parametrize("items", [[], None, {"sku": "TEE-BLK"}, "TEE-BLK"])
def test_normalize_cart_rejects_empty_or_non_list(items, catalog):
    with pytest.raises(EmptyCartError) as exc:
        normalize_cart(items, catalog)
    assert exc.value.status_code == 400
    assert exc.value.message == "Cart is empty"


def test_normalize_cart_unknown_sku_rejects_whole_cart(catalog):
    with pytest.raises(UnknownSkuError) as exc:
        normalize_cart([{"sku": "TEE-BLK", "qty": 1}, {"sku": "NOPE--M", "qty": 1}], catalog)
    assert exc.value.sku == "NOPE"
    assert exc.value.message == "Unknown or inactive product: NOPE"


def test_normalize_cart_inactive_product_is_rejected(catalog):
    with pytest.raises(UnknownSkuError):
        normalize_cart([{"sku": "TOTE-ARCHIVE", "qty": 1}], catalog)


def test_normalize_cart_non_dict_entry_is_unknown(catalog):
    with pytest.raises(UnknownSkuError):
        normalize_cart(["TEE-BLK"], catalog)
