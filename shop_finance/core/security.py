from jose import JWTError, jwt
from shop_finance.core.exceptions import UnauthenticatedException

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Args:
        authorization: Raw header value (may be None)

    Returns:
        The bearer token

    Raises:
        UnauthenticatedException: If header is absent, not Bearer, or empty
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedException("Unauthorized")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedException("Unauthorized")

    return ensure_well_formed(token)


def ensure_well_formed(token: str) -> str:
    """
    Check that a token is a structurally valid JWT without verifying it.

    Signature and expiry are the identity provider's call; this only keeps
    garbage from ever reaching the network.

    Raises:
        UnauthenticatedException: If token cannot be parsed as a JWT
    """
    try:
        jwt.get_unverified_header(token)
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        raise UnauthenticatedException("Unauthorized")

    if not isinstance(claims, dict) or not claims.get("sub"):
        raise UnauthenticatedException("Unauthorized")

    return token
