"""Bearer-token verification and request tracing."""

from storefront.core.auth.backend import create_access_token, decode_token
from storefront.core.auth.dependencies import BearerToken, get_bearer_token
from storefront.core.auth.middleware import RequestIdMiddleware
from storefront.core.auth.schemas import CustomerIdentity


__all__ = [
    "BearerToken",
    "CustomerIdentity",
    "RequestIdMiddleware",
    "create_access_token",
    "decode_token",
    "get_bearer_token",
]
