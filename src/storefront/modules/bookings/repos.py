"""Booking repository.

Writes commit immediately: each one is an independent durable step of
an intake request.
"""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.bookings.models import Booking, BookingStatus, Customer


class BookingRepository:
    """Repository for bookings and the customers they reference."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, booking: Booking) -> Booking:
        """Insert a booking and commit.

        Returns:
            The created booking with ID populated
        """
        self.session.add(booking)
        await self.session.commit()
        await self.session.refresh(booking)
        return booking

    async def get(self, booking_id: UUID, website_id: UUID) -> Booking | None:
        """Get a booking of one website by ID."""
        stmt = select(Booking).where(
            Booking.id == booking_id,
            Booking.website_id == website_id,
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def cancel(self, booking_id: UUID, website_id: UUID) -> bool:
        """Move a booking to ``cancelled`` unless it is completed or cancelled.

        The status condition is part of the UPDATE itself, so concurrent
        cancellations produce a single transition.

        Returns:
            True if this call changed the status
        """
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.website_id == website_id,
                Booking.status.not_in([BookingStatus.COMPLETED, BookingStatus.CANCELLED]),
            )
            .values(status=BookingStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def get_customer(self, customer_id: UUID, website_id: UUID) -> Customer | None:
        """Get a customer of one website by ID."""
        stmt = select(Customer).where(
            Customer.id == customer_id,
            Customer.website_id == website_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_customer_phone(self, customer: Customer, phone: str) -> None:
        """Store the phone a returning customer booked with."""
        customer.phone = phone
        await self.session.commit()
