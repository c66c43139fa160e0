"""Order lifecycle transitions backed by compare-and-set updates."""

import logging
from uuid import UUID

from src.models.order import OrderStatus
from src.repositories.orders import OrderRepository

logger = logging.getLogger(__name__)

# Every edge an order may take; "pending" is never stored
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    "pending": frozenset({"paid"}),
    "paid": frozenset({"training", "generating"}),
    "training": frozenset({"generating", "failed"}),
    "generating": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset({"completed", "failed"})


def is_allowed(current: OrderStatus, new: OrderStatus) -> bool:
    """Whether ``current -> new`` is an edge of the order lifecycle."""
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


class OrderStateMachine:
    """Advances orders along the lifecycle.

    Each transition is a conditional update on the expected predecessor
    status. Disallowed edges and lost races are logged and reported as
    ``False``; they never raise.
    """

    def __init__(self, orders: OrderRepository) -> None:
        self.orders = orders

    def advance(self, order_id: UUID | str, expected: OrderStatus, new: OrderStatus) -> bool:
        """Move an order from ``expected`` to ``new``.

        Args:
            order_id: Order UUID.
            expected: Status the order must currently have.
            new: Target status.

        Returns:
            bool: True if this call performed the transition.
        """
        if not is_allowed(expected, new):
            logger.warning("Ignoring invalid transition %s -> %s for order %s", expected, new, order_id)
            return False

        won = self.orders.compare_and_set_status(order_id, expected, new)
        if won:
            logger.info("Order %s: %s -> %s", order_id, expected, new)
        else:
            logger.info("Order %s: transition %s -> %s lost (status changed)", order_id, expected, new)
        return won

    def fail(self, order_id: UUID | str, current: OrderStatus) -> bool:
        """Move an in-flight order to ``failed``."""
        return self.advance(order_id, current, "failed")
