"""Payment-intent boundary for online order payment."""

import asyncio
from dataclasses import dataclass
from typing import Protocol

import stripe
import structlog


logger = structlog.get_logger()


@dataclass(frozen=True)
class PaymentIntent:
    """Provider-side payment intent created for an order."""

    id: str
    client_secret: str
    status: str


class PaymentProvider(Protocol):
    """Creates payment intents; ``amount`` is in minor currency units."""

    async def create_payment_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent: ...


class StripePaymentProvider:
    """Stripe implementation running SDK calls in a worker thread."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def create_payment_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        """Create a Stripe PaymentIntent.

        Raises:
            stripe.StripeError: If Stripe rejects the request
        """
        intent = await asyncio.to_thread(
            stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
            api_key=self.api_key,
        )
        logger.info(
            "payment_intent_created",
            payment_intent_id=intent.id,
            amount=amount,
            currency=currency,
        )
        return PaymentIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
        )
