# storefront/shop.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from .admin.catalog import ProductRepository
from .admin.orders import OrderRepository
from .records import OrderRecord, OrderStatus

logger = logging.getLogger(__name__)


class ProductNotFound(Exception):
    pass


class OrderSubmissionFailed(Exception):
    pass


def new_order_id() -> str:
    return uuid4().hex[:8].upper()


def submit_order(
    products: ProductRepository,
    orders: OrderRepository,
    product_id: int,
    discord_username: Optional[str] = None,
    email: Optional[str] = None,
    message: Optional[str] = None,
) -> OrderRecord:
    """
    Creates a Pending order. Product name and price are copied from the
    catalog as they are right now and never re-derived afterwards.
    """
    product, error = products.get_product(product_id)
    if error:
        raise OrderSubmissionFailed(error)
    if product is None:
        raise ProductNotFound(product_id)

    order, error = orders.create_order(
        {
            "order_id": new_order_id(),
            "product_name": product.name,
            "price": product.price,
            "discord_username": (discord_username or "").strip() or None,
            "email": (email or "").strip() or None,
            "status": OrderStatus.PENDING.value,
            "message": (message or "").strip() or None,
        }
    )
    if error or order is None:
        raise OrderSubmissionFailed(error or "Order was not stored")

    logger.info("order %s submitted for product %s", order.order_id, product.id)
    return order
