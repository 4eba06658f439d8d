"""
Product provisioning tests.
"""
from decimal import Decimal

import pytest

from polimarket.errors import BusinessRuleViolation, InvalidInput, NotFound, ProductNotFound
from polimarket.models import Party, PartyProfile, Product, StockLevel, StockMovement
from polimarket.services import ledger_service, products_service


def test_create_product_provisions_stock(db_session, seller):
    receipt = products_service.create_product(
        name="Coffee",
        sale_unit="kg",
        unit_price="12.50",
        initial_quantity=20,
    )

    assert receipt.message == "Product created successfully with initial stock of 20 units"
    level = db_session.query(StockLevel).filter_by(product_id=receipt.id).one()
    assert level.available_quantity == 20
    assert level.party_id == seller.id

    product = products_service.get_product(str(receipt.id))
    assert product["unit_price"] == "12.50"
    assert product["available_quantity"] == 20


def test_scenario_no_seller_creates_nothing(db_session, customer):
    with pytest.raises(BusinessRuleViolation):
        products_service.create_product(
            name="Orphan",
            sale_unit="unit",
            unit_price="1.00",
            initial_quantity=20,
        )

    assert db_session.query(Product).count() == 0
    assert db_session.query(StockLevel).count() == 0
    assert db_session.query(StockMovement).count() == 0


def test_inactive_seller_does_not_count(db_session):
    db_session.add(Party(name="Gone", document="S-9", profile=PartyProfile.SELLER, is_active=False))
    db_session.commit()

    with pytest.raises(BusinessRuleViolation):
        products_service.create_product(
            name="Orphan", sale_unit="unit", unit_price="1.00", initial_quantity=0
        )


def test_custom_actor_resolver(db_session, customer):
    receipt = products_service.create_product(
        name="Tea",
        sale_unit="box",
        unit_price=Decimal("3.20"),
        initial_quantity=5,
        resolve_actor=lambda: customer,
    )

    movement = ledger_service.list_movements(receipt.id)[0]
    assert movement.party_id == customer.id


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "  "},
        {"sale_unit": None},
        {"unit_price": "0"},
        {"unit_price": "-1.00"},
        {"unit_price": "abc"},
        {"initial_quantity": -1},
        {"initial_quantity": "2.5"},
    ],
)
def test_invalid_product_input(db_session, seller, overrides):
    fields = {"name": "Sugar", "sale_unit": "kg", "unit_price": "2.00", "initial_quantity": 1}
    fields.update(overrides)

    with pytest.raises(InvalidInput):
        products_service.create_product(**fields)
    assert db_session.query(Product).count() == 0


def test_float_price_stored_exactly(db_session, seller):
    receipt = products_service.create_product(
        name="Rice", sale_unit="kg", unit_price=0.1, initial_quantity=0
    )
    assert db_session.get(Product, receipt.id).unit_price == Decimal("0.10")


def test_list_products_ordered_by_name(db_session, make_product):
    make_product(name="Zucchini", initial_quantity=1)
    make_product(name="Apple", initial_quantity=2)

    listing = products_service.list_products()
    assert listing["count"] == 2
    assert [p["name"] for p in listing["items"]] == ["Apple", "Zucchini"]
    assert [p["available_quantity"] for p in listing["items"]] == [2, 1]


def test_deactivate_product(db_session, product_id):
    assert products_service.deactivate_product(str(product_id)) is True
    assert products_service.deactivate_product(str(product_id)) is False

    with pytest.raises(ProductNotFound):
        products_service.get_product(product_id)
    with pytest.raises(NotFound):
        ledger_service.get_available(product_id)
    assert products_service.list_products()["count"] == 0


def test_product_exists_active(db_session, product_id):
    assert products_service.product_exists_active(product_id) is True

    products_service.deactivate_product(product_id)
    assert products_service.product_exists_active(product_id) is False
