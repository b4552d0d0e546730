# storefront/admin/order_review.py
"""
Order review state: a frozen state value, action records, and a pure
``reduce(state, action) -> state``. The view-model is the only place that
talks to the repository, and it feeds each confirmed result back through
``reduce``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Tuple, Union

from ..notify import Notifier
from ..records import OrderRecord, OrderStatus
from .guard import ConfirmationRequired, InFlightGuard
from .orders import OrderRepository

ALL = "All"
STATUS_FILTERS: Tuple[str, ...] = (ALL,) + tuple(s.value for s in OrderStatus)

# Unguarded: any status may move to any other one.
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    s: frozenset(t for t in OrderStatus if t is not s) for s in OrderStatus
}

DEMO_ORDERS: Tuple[OrderRecord, ...] = (
    OrderRecord(
        id=1,
        order_id="TEST0001",
        product_name="Productivity Software X",
        price=49.99,
        discord_username="usuario_test",
        email="test@ejemplo.com",
        status=OrderStatus.PENDING,
        message="This is a test order",
    ),
)


def available_transitions(status: Union[OrderStatus, str]) -> List[OrderStatus]:
    try:
        allowed = ALLOWED_TRANSITIONS[OrderStatus(status)]
    except ValueError:
        # a status written by another client can move to any known one
        return list(OrderStatus)
    return [s for s in OrderStatus if s in allowed]


# -------------------
# State + actions
# -------------------
@dataclass(frozen=True)
class OrderReviewState:
    orders: Tuple[OrderRecord, ...] = ()
    status_filter: str = ALL
    search_term: str = ""
    loading: bool = False
    connection_error: bool = False
    loaded: bool = False


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class OrdersLoaded:
    orders: Tuple[OrderRecord, ...]


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class DemoDataLoaded:
    pass


@dataclass(frozen=True)
class FilterChanged:
    status: str


@dataclass(frozen=True)
class SearchChanged:
    term: str


@dataclass(frozen=True)
class StatusChanged:
    order_id: str
    status: OrderStatus


@dataclass(frozen=True)
class OrderRemoved:
    order_id: str


Action = Union[
    LoadStarted,
    OrdersLoaded,
    LoadFailed,
    DemoDataLoaded,
    FilterChanged,
    SearchChanged,
    StatusChanged,
    OrderRemoved,
]


def reduce(state: OrderReviewState, action: Action) -> OrderReviewState:
    if isinstance(action, LoadStarted):
        return replace(state, loading=True, connection_error=False)

    if isinstance(action, OrdersLoaded):
        return replace(state, orders=tuple(action.orders), loading=False, loaded=True)

    if isinstance(action, LoadFailed):
        # never keep a stale list around after a failed load
        return replace(state, orders=(), loading=False, connection_error=True, loaded=True)

    if isinstance(action, DemoDataLoaded):
        return replace(state, orders=DEMO_ORDERS, loaded=True)

    if isinstance(action, FilterChanged):
        if action.status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter '{action.status}'")
        return replace(state, status_filter=action.status)

    if isinstance(action, SearchChanged):
        return replace(state, search_term=action.term or "")

    if isinstance(action, StatusChanged):
        return replace(
            state,
            orders=tuple(
                o.with_status(action.status) if o.order_id == action.order_id else o
                for o in state.orders
            ),
        )

    if isinstance(action, OrderRemoved):
        return replace(state, orders=tuple(o for o in state.orders if o.order_id != action.order_id))

    raise TypeError(f"Unhandled action {action!r}")


def _matches_search(order: OrderRecord, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in field.lower() for field in order.search_fields())


def filter_orders(orders: Iterable[OrderRecord], status_filter: str, search_term: str) -> List[OrderRecord]:
    return [
        o
        for o in orders
        if (status_filter == ALL or o.status_label == status_filter) and _matches_search(o, search_term)
    ]


def displayed_orders(state: OrderReviewState) -> List[OrderRecord]:
    return filter_orders(state.orders, state.status_filter, state.search_term)


# -------------------
# View-model
# -------------------
class OrderReviewViewModel:
    def __init__(self, repository: OrderRepository, notifier: Notifier, guard: InFlightGuard | None = None):
        self.repository = repository
        self.notifier = notifier
        self.guard = guard or InFlightGuard()
        self.state = OrderReviewState()

    def dispatch(self, action: Action) -> OrderReviewState:
        self.state = reduce(self.state, action)
        return self.state

    @property
    def displayed(self) -> List[OrderRecord]:
        return displayed_orders(self.state)

    def refresh(self) -> bool:
        self.dispatch(LoadStarted())
        orders, error = self.repository.list_orders()

        if error:
            self.dispatch(LoadFailed(error))
            self.notifier.error("Could not load orders", f"Orders could not be loaded: {error}")
            return False

        self.dispatch(OrdersLoaded(tuple(orders)))
        if orders:
            self.notifier.notify("Orders loaded", f"{len(orders)} orders loaded.")
        else:
            self.notifier.notify("No orders", "There are no orders in the database.")
        return True

    def load_demo_data(self) -> None:
        self.dispatch(DemoDataLoaded())
        self.notifier.notify("Sample data loaded", "Sample orders were loaded for testing.")

    def apply_filter(self, status: str) -> OrderReviewState:
        return self.dispatch(FilterChanged(status))

    def apply_search(self, term: str) -> OrderReviewState:
        return self.dispatch(SearchChanged(term))

    def transition(self, order_id: str, status: OrderStatus) -> bool:
        status = OrderStatus(status)
        with self.guard.hold(order_id):
            error = self.repository.set_order_status(order_id, status)

        if error:
            self.notifier.error("Could not update status", f"The status could not be updated: {error}")
            return False

        self.dispatch(StatusChanged(order_id, status))
        self.notifier.notify("Status updated", f"Order {order_id} is now {status.value}.")
        return True

    def remove(self, order_id: str, confirmed: bool = False) -> bool:
        if not confirmed:
            raise ConfirmationRequired(f"Confirm deletion of order {order_id}")

        with self.guard.hold(order_id):
            error = self.repository.delete_order(order_id)

        if error:
            self.notifier.error("Could not delete order", f"The order could not be deleted: {error}")
            return False

        self.dispatch(OrderRemoved(order_id))
        self.notifier.notify("Order deleted", f"Order {order_id} was deleted.")
        return True
