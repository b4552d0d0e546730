# storefront/admin/orders.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..gateway import SqlGateway
from ..records import OrderRecord, OrderStatus, order_from_row

TABLE = "orders"

logger = logging.getLogger(__name__)


class OrderRepository:
    """Passthrough to the ``orders`` table. Mutations are keyed by ``order_id`` only."""

    def __init__(self, gateway: SqlGateway):
        self.gateway = gateway

    def list_orders(self) -> Tuple[List[OrderRecord], Optional[str]]:
        res = self.gateway.select(TABLE)
        if not res.ok:
            return [], res.error
        try:
            return [order_from_row(r) for r in (res.data or [])], None
        except ValidationError as e:
            logger.warning("orders: unreadable row (%s)", e.errors()[0]["msg"])
            return [], "An order row could not be read"

    def set_order_status(self, order_id: str, status: OrderStatus) -> Optional[str]:
        res = self.gateway.update(TABLE, {"status": OrderStatus(status).value}, {"order_id": order_id})
        return res.error

    def delete_order(self, order_id: str) -> Optional[str]:
        # zero matched rows is not an error
        return self.gateway.delete(TABLE, {"order_id": order_id}).error

    def create_order(self, record: Dict[str, Any]) -> Tuple[Optional[OrderRecord], Optional[str]]:
        res = self.gateway.insert(TABLE, record)
        if not res.ok:
            return None, res.error
        return order_from_row(res.data), None
