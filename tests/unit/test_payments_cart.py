import pytest

from storefront.errors import EmptyCart, InsufficientStock, InvalidCart, UnknownProduct
from storefront.payments import aggregate_quantities, to_line_items, validate_cart


def test_aggregate_quantities_merges_repeated_ids():
    items = [
        {"id": "p1", "quantity": 1},
        {"id": "p3", "quantity": 2},
        {"id": "p1", "quantity": 1},  # agrégé
    ]
    result = aggregate_quantities(items)
    assert result == {"p1": 2, "p3": 2}
    assert list(result) == ["p1", "p3"]


@pytest.mark.parametrize("items", [[], None])
def test_aggregate_quantities_empty_raises(items):
    with pytest.raises(EmptyCart):
        aggregate_quantities(items)


@pytest.mark.parametrize("bad_line", [
    {"id": "p1", "quantity": 0},
    {"id": "p1", "quantity": -2},
    {"id": "p1", "quantity": "abc"},
    {"id": "p1", "quantity": 2.5},
    {"id": "p1", "quantity": True},
    {"id": "p1", "quantity": "²"},
    {"id": "", "quantity": 1},
    {"quantity": 1},
    "p1",
])
def test_aggregate_quantities_rejects_malformed_lines(bad_line):
    with pytest.raises(InvalidCart) as exc:
        aggregate_quantities([bad_line])
    assert exc.value.status_code == 400


def test_aggregate_quantities_accepts_numeric_strings():
    assert aggregate_quantities([{"id": "p1", "quantity": "2"}]) == {"p1": 2}


def test_validate_cart_preserves_order_and_quantities(store):
    items = [{"id": "p3", "quantity": 10}, {"id": "p1", "quantity": 3}, {"id": "p2", "quantity": 1}]
    lines = validate_cart(items, store.find_by_id)
    assert [(l.product.id, l.quantity) for l in lines] == [("p3", 10), ("p1", 3), ("p2", 1)]


def test_validate_cart_insufficient_stock_names_product_and_stock(store):
    with pytest.raises(InsufficientStock) as exc:
        validate_cart([{"id": "p2", "quantity": 2}], store.find_by_id)
    err = exc.value
    assert err.product_id == "p2"
    assert err.available_stock == 1
    assert "Restant: 1" in err.message
    assert err.to_dict()["available_stock"] == 1


def test_validate_cart_first_violation_wins(store):
    items = [{"id": "p3", "quantity": 1}, {"id": "p1", "quantity": 4}, {"id": "p2", "quantity": 5}]
    with pytest.raises(InsufficientStock) as exc:
        validate_cart(items, store.find_by_id)
    assert exc.value.product_id == "p1"


def test_validate_cart_merged_quantity_is_checked_against_stock(store):
    items = [{"id": "p1", "quantity": 2}, {"id": "p1", "quantity": 2}]
    with pytest.raises(InsufficientStock) as exc:
        validate_cart(items, store.find_by_id)
    assert exc.value.available_stock == 3


def test_validate_cart_does_not_touch_stock(store):
    validate_cart([{"id": "p1", "quantity": 3}], store.find_by_id)
    with pytest.raises(InsufficientStock):
        validate_cart([{"id": "p2", "quantity": 9}], store.find_by_id)
    assert store.find_by_id("p1").stock == 3
    assert store.find_by_id("p2").stock == 1


def test_validate_cart_drops_unknown_products_by_default(store):
    lines = validate_cart([{"id": "ghost", "quantity": 1}, {"id": "p1", "quantity": 1}], store.find_by_id)
    assert [l.product.id for l in lines] == ["p1"]


def test_validate_cart_strict_rejects_unknown_products(store):
    with pytest.raises(UnknownProduct) as exc:
        validate_cart([{"id": "p1", "quantity": 1}, {"id": "ghost", "quantity": 1}], store.find_by_id, strict=True)
    assert exc.value.product_id == "ghost"


def test_validate_cart_only_unknown_products_is_empty(store):
    with pytest.raises(EmptyCart):
        validate_cart([{"id": "ghost", "quantity": 1}], store.find_by_id)


def test_to_line_items_uses_catalog_prices(store):
    lines = validate_cart([{"id": "p1", "quantity": 2}, {"id": "p3", "quantity": 1}], store.find_by_id)
    line_items = to_line_items(lines)
    assert line_items[0] == {
        "quantity": 2,
        "price_data": {
            "currency": "eur",
            "unit_amount": 4500,
            "product_data": {"name": "Veste", "description": "Veste en jean"},
        },
    }
    # description vide: Stripe refuse une chaîne vide, on ne l'envoie pas
    assert line_items[1]["price_data"]["product_data"] == {"name": "Cahier"}
