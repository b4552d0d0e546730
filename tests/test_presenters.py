"""Tests for the view dictionaries handed to the admin screens."""

from storefront.admin.order_review import FilterChanged, LoadFailed, OrderReviewState, OrdersLoaded, SearchChanged, reduce
from storefront.admin.presenters import (
    badge_variant,
    format_price,
    present_order_review,
    present_order_row,
    present_product_admin,
    present_product_card,
)
from storefront.admin.product_admin import ProductCatalogState, ProductSelected, ProductsLoaded
from storefront.admin.product_admin import reduce as reduce_products
from storefront.records import OrderRecord, ProductRecord


def test_order_row_hides_current_status_action():
    row = present_order_row(OrderRecord(order_id="A1", status="Completed", price=3))

    assert row["actions"] == ["Pending", "Cancelled", "delete"]
    assert row["badge"] == "success"
    assert row["price"] == "$3.00"
    assert row["customer"] == "No user"
    assert row["email"] == "No email"
    assert row["product_name"] == "No name"


def test_unknown_status_row_offers_every_status():
    row = present_order_row(OrderRecord(order_id="S1", status="Shipped"))

    assert row["status"] == "Shipped"
    assert row["badge"] == "secondary"
    assert row["actions"] == ["Pending", "Completed", "Cancelled", "delete"]


def test_badge_variants():
    assert badge_variant("Pending") == "warning"
    assert badge_variant("Cancelled") == "destructive"
    assert badge_variant("Shipped") == "secondary"


def test_format_price_tolerates_garbage():
    assert format_price("oops") == "$0.00"
    assert format_price(None, "£") == "£0.00"


def test_footer_and_empty_messages():
    state = reduce(OrderReviewState(), OrdersLoaded((OrderRecord(order_id="A1"), OrderRecord(order_id="B2"))))
    state = reduce(reduce(state, FilterChanged("Pending")), SearchChanged("a1"))

    view = present_order_review(state)

    assert view["footer"] == 'Showing 1 order with status "Pending" matching "a1"'
    assert [f["status"] for f in view["filters"] if f["active"]] == ["Pending"]
    assert view["empty_message"] is None

    view = present_order_review(reduce(state, SearchChanged("zzz")))
    assert view["empty_message"] == "Try changing the filters or the search"
    assert view["footer"].startswith("Showing 0 orders")


def test_connection_error_offers_demo_data():
    view = present_order_review(reduce(OrderReviewState(), LoadFailed("down")))

    assert view["can_load_demo"] is True
    assert view["rows"] == []
    assert view["empty_message"] == "There are no orders in the database"


def test_product_card_preview():
    card = present_product_card(
        ProductRecord(id=1, name="X", description="one\ntwo\nthree", price=49.99, icon_name="Rocket")
    )

    assert card["description_preview"] == ["one", "two"]
    assert card["truncated"] is True
    assert card["icon"] == "Code"
    assert card["price"] == "$49.99"


def test_product_admin_form_modes():
    products = (ProductRecord(id=7, name="X", description="d", price=50, category="c", icon_name="Brain"),)
    state = reduce_products(ProductCatalogState(), ProductsLoaded(products))

    assert present_product_admin(state)["form"]["mode"] == "create"

    view = present_product_admin(reduce_products(state, ProductSelected(7)))
    assert view["form"]["mode"] == "edit"
    assert view["form"]["values"]["price"] == "50"
    assert view["form"]["values"]["icon_name"] == "Brain"
