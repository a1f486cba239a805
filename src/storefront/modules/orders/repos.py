"""Order repository.

Each method is one committed statement so that the order saga can undo
an earlier step after a later one fails. A failed write is rolled back
before the error propagates, leaving the session usable for the undo.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from storefront.modules.orders.models import Order, OrderItem, OrderStatus


class OrderRepository:
    """Repository for orders and their items."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def _execute(self, statement: Executable) -> None:
        """Run one bulk statement without touching instances in the session."""
        try:
            await self.session.execute(statement)
        except Exception:
            await self.session.rollback()
            raise
        await self._commit()

    async def insert_order(self, order: Order) -> Order:
        """Insert the parent order row and commit."""
        self.session.add(order)
        await self._commit()
        await self.session.refresh(order)
        return order

    async def insert_items(self, items: Sequence[OrderItem]) -> list[OrderItem]:
        """Insert all line items of one order in a single commit.

        On failure nothing is kept, so the caller only has to undo the
        parent order.
        """
        self.session.add_all(items)
        await self._commit()
        return list(items)

    async def delete_order(self, order_id: UUID) -> None:
        """Delete an order (its items cascade)."""
        await self._execute(
            delete(Order)
            .where(Order.id == order_id)
            .execution_options(synchronize_session=False)
        )

    async def mark_failed(self, order_id: UUID) -> None:
        """Mark an order whose payment could not be started as failed."""
        await self._execute(
            update(Order)
            .where(Order.id == order_id)
            .values(status=OrderStatus.FAILED, payment_status="failed")
            .execution_options(synchronize_session=False)
        )

    async def set_payment(self, order_id: UUID, intent_id: str, payment_status: str) -> None:
        """Store the payment intent correlation ID on the order."""
        await self._execute(
            update(Order)
            .where(Order.id == order_id)
            .values(payment_intent_id=intent_id, payment_status=payment_status)
            .execution_options(synchronize_session=False)
        )

    async def get(self, order_id: UUID) -> Order | None:
        """Get an order by ID."""
        result = await self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
