#!/usr/bin/env python
"""
Generate demo/seed data for development.
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import select


# Add src to path for imports
sys.path.insert(0, "src")

from storefront.core.database import async_session_factory
from storefront.modules.availability.models import BusinessHourSlot
from storefront.modules.catalog.models import MenuItem, Professional, ServiceItem
from storefront.modules.tenants.models import Website


WEEKDAYS = range(0, 5)  # Monday to Friday
SHIFTS = [("09:00", "13:00"), ("16:00", "20:00")]


async def _create_website(
    subdomain: str, business_type: str, config: dict[str, object]
) -> Website | None:
    async with async_session_factory() as session:
        result = await session.execute(select(Website).where(Website.subdomain == subdomain))
        existing = result.scalar_one_or_none()
        if existing:
            print(f"Website already exists: {existing.subdomain} ({existing.id})")
            return None

        website = Website(
            id=uuid4(),
            subdomain=subdomain,
            domain=f"{subdomain}.example.com",
            business_type=business_type,
            is_active=True,
            config=config,
        )
        session.add(website)

        for weekday in WEEKDAYS:
            for order, (open_time, close_time) in enumerate(SHIFTS):
                session.add(
                    BusinessHourSlot(
                        website_id=website.id,
                        day_of_week=weekday,
                        open_time=open_time,
                        close_time=close_time,
                        sort_order=order,
                    )
                )

        await session.commit()
        print(f"Created website: {website.subdomain} ({website.id})")
        return website


async def seed_default() -> None:
    """Create a demo restaurant with a menu."""
    website = await _create_website(
        "bistro",
        "restaurant",
        {"business_name": "Demo Bistro", "timezone": "Europe/Madrid", "currency": "eur"},
    )
    if website is None:
        return

    async with async_session_factory() as session:
        for name, price in [("Margherita", "9.50"), ("Lasagna", "12.00"), ("Tiramisu", "5.50")]:
            session.add(MenuItem(website_id=website.id, name=name, price=Decimal(price)))
        await session.commit()
    print("Created menu for Demo Bistro")


async def seed_demo() -> None:
    """Create the default restaurant plus a salon with services and staff."""
    await seed_default()

    website = await _create_website(
        "salon",
        "salon",
        {"business_name": "Demo Salon", "timezone": "Europe/Madrid"},
    )
    if website is None:
        return

    async with async_session_factory() as session:
        for name, price, minutes in [("Haircut", "18.00", 30), ("Colour", "45.00", 90)]:
            session.add(
                ServiceItem(
                    website_id=website.id,
                    name=name,
                    price=Decimal(price),
                    duration_minutes=minutes,
                )
            )
        for name in ("Ana", "Luis"):
            session.add(Professional(website_id=website.id, name=name))
        await session.commit()
    print("Created services and professionals for Demo Salon")


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with demo data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
