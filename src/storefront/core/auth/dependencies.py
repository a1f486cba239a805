"""FastAPI dependencies for bearer-token authentication."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the raw bearer token, or None when the header is absent.

    Verification happens inside the intake pipeline so that a missing
    token and a bad payload are reported in a fixed order.
    """
    if not credentials or not credentials.credentials:
        return None
    return credentials.credentials


BearerToken = Annotated[str | None, Depends(get_bearer_token)]
