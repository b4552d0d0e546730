# storefront/admin/presenters.py
from __future__ import annotations

from typing import Any, Dict, List

from ..records import OrderRecord, OrderStatus, ProductRecord
from .order_review import ALL, STATUS_FILTERS, OrderReviewState, available_transitions, displayed_orders
from .product_admin import ProductCatalogState

_BADGES = {
    OrderStatus.COMPLETED: "success",
    OrderStatus.PENDING: "warning",
    OrderStatus.CANCELLED: "destructive",
}


def format_price(value: Any, currency_symbol: str = "$") -> str:
    try:
        return f"{currency_symbol}{float(value or 0.0):.2f}"
    except (TypeError, ValueError):
        return f"{currency_symbol}0.00"


def badge_variant(status: Any) -> str:
    try:
        return _BADGES.get(OrderStatus(status), "secondary")
    except ValueError:
        return "secondary"


# -------------------
# Orders
# -------------------
def present_order_row(order: OrderRecord, currency_symbol: str = "$") -> Dict[str, Any]:
    return {
        "order_id": order.order_id,
        "id_label": order.order_id or "No ID",
        "product_name": order.product_name or "No name",
        "customer": order.discord_username or "No user",
        "email": order.email or "No email",
        "price": format_price(order.price, currency_symbol),
        "status": order.status_label,
        "badge": badge_variant(order.status),
        "message": order.message,
        # the button for the current status is hidden
        "actions": [s.value for s in available_transitions(order.status)] + ["delete"],
    }


def _footer(count: int, state: OrderReviewState) -> str:
    noun = "order" if count == 1 else "orders"
    caption = f"Showing {count} {noun}"
    if state.status_filter != ALL:
        caption += f' with status "{state.status_filter}"'
    if state.search_term:
        caption += f' matching "{state.search_term}"'
    return caption


def present_order_review(state: OrderReviewState, currency_symbol: str = "$") -> Dict[str, Any]:
    shown = displayed_orders(state)

    empty_message = None
    if not state.loading and not shown:
        empty_message = (
            "There are no orders in the database"
            if not state.orders
            else "Try changing the filters or the search"
        )

    return {
        "loading": state.loading,
        "connection_error": state.connection_error,
        "can_load_demo": state.connection_error,
        "filters": [{"status": s, "active": s == state.status_filter} for s in STATUS_FILTERS],
        "status_filter": state.status_filter,
        "search_term": state.search_term,
        "total": len(state.orders),
        "rows": [present_order_row(o, currency_symbol) for o in shown],
        "empty_message": empty_message,
        "footer": _footer(len(shown), state),
    }


# -------------------
# Products
# -------------------
def present_product_card(product: ProductRecord, currency_symbol: str = "$") -> Dict[str, Any]:
    lines = (product.description or "").split("\n")
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "icon": product.display_icon,
        "image_url": product.image_url,
        "description_preview": lines[:2],
        "truncated": len(lines) > 2,
        "price": format_price(product.price, currency_symbol),
    }


def _plain_price(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def present_product_form(product: ProductRecord | None) -> Dict[str, Any]:
    if product is None:
        return {
            "mode": "create",
            "values": {"name": "", "description": "", "price": "", "category": "", "icon_name": "Code", "image_url": ""},
        }
    return {
        "mode": "edit",
        "product_id": product.id,
        "values": {
            "name": product.name,
            "description": product.description,
            "price": _plain_price(product.price),
            "category": product.category,
            "icon_name": product.display_icon,
            "image_url": product.image_url or "",
        },
    }


def present_product_admin(state: ProductCatalogState, currency_symbol: str = "$") -> Dict[str, Any]:
    cards: List[Dict[str, Any]] = [present_product_card(p, currency_symbol) for p in state.products]
    return {
        "loading": state.loading,
        "load_error": state.load_error,
        "cards": cards,
        "empty_message": None if cards or state.loading else "No products available.",
        "form": present_product_form(state.selected),
    }
