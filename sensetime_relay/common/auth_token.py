"""
Outbound Token Signing

SenseTime authenticates every call with a short-lived HS256 JWT minted from
the channel's access key / secret key pair. A fresh token is signed per
request; nothing is cached.
"""

import logging
from typing import Optional

import jwt

from sensetime_relay.common.errors import AuthError
from sensetime_relay.common.time import get_timestamp
from sensetime_relay.config import get_settings

logger = logging.getLogger(__name__)

API_KEY_SEPARATOR = "|"


def parse_api_key(api_key: Optional[str]) -> tuple[str, str]:
    """
    Split a channel key into its access key and secret key

    Args:
        api_key: Channel key in "<access_key>|<secret_key>" form

    Returns:
        tuple[str, str]: (access_key, secret_key)

    Raises:
        AuthError: The key is missing or not a two-part pair
    """
    parts = (api_key or "").split(API_KEY_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise AuthError(message="invalid_auth", code="invalid_auth")
    return parts[0], parts[1]


def get_token(
    access_key: str,
    secret_key: str,
    ttl_seconds: Optional[int] = None,
    skew_seconds: Optional[int] = None,
) -> str:
    """
    Sign an outbound bearer token

    Claims: iss = access key, exp = now + ttl, nbf = now - skew.

    Args:
        access_key: Issuer key
        secret_key: HMAC secret
        ttl_seconds: Token lifetime, defaults to configuration
        skew_seconds: Not-before tolerance, defaults to configuration

    Returns:
        str: Encoded JWT

    Raises:
        AuthError: Signing failed
    """
    settings = get_settings()
    if ttl_seconds is None:
        ttl_seconds = settings.TOKEN_TTL_SECONDS
    if skew_seconds is None:
        skew_seconds = settings.TOKEN_NOT_BEFORE_SKEW_SECONDS

    if not access_key or not secret_key:
        raise AuthError(message="access key and secret key are required", code="token_signing_failed")

    now = get_timestamp()
    payload = {
        "iss": access_key,
        "exp": now + ttl_seconds,
        "nbf": now - skew_seconds,
    }
    try:
        return jwt.encode(payload, secret_key, algorithm="HS256")
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        logger.error("Error encoding JWT token: %s", str(e))
        raise AuthError(message=f"failed to sign token: {e}", code="token_signing_failed") from e


def build_authorization(api_key: Optional[str]) -> str:
    """
    Produce the Authorization header value for a channel key

    Raises:
        AuthError: Malformed key or signing failure
    """
    access_key, secret_key = parse_api_key(api_key)
    return get_token(access_key, secret_key)
