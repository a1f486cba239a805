"""Authentication schemas for customer portal tokens."""

from uuid import UUID

from pydantic import BaseModel


class CustomerIdentity(BaseModel):
    """Verified identity extracted from a portal bearer token.

    Attributes:
        user_id: The authenticated portal user (``sub`` claim)
        tenant_id: The website the token was issued for
    """

    user_id: UUID
    tenant_id: UUID
