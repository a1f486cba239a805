"""JWT verification for customer portal bearer tokens.

Token issuance belongs to the portal login flow; the intake service only
verifies tokens presented on mutations of existing records.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from jose import JWTError, jwt

from storefront.config import settings
from storefront.core.auth.schemas import CustomerIdentity


logger = structlog.get_logger()


def create_access_token(
    user_id: UUID,
    tenant_id: UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived portal access token.

    Used by the seed script and tests to mint tokens the way the portal
    login flow does.
    """
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=15))
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "exp": expire,
        "iat": datetime.now(UTC),
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> CustomerIdentity | None:
    """Decode and validate a portal access token.

    Args:
        token: The JWT token to decode

    Returns:
        CustomerIdentity if valid, None if invalid, expired or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.info("token_rejected", reason=str(exc))
        return None

    user_id = payload.get("sub")
    tenant_id = payload.get("tenant_id")
    if not user_id or not tenant_id or payload.get("type", "access") != "access":
        return None

    try:
        return CustomerIdentity(user_id=UUID(user_id), tenant_id=UUID(tenant_id))
    except ValueError:
        return None
