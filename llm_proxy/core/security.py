"""Identity gate: verifies Google ID tokens presented as bearer credentials."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from llm_proxy.core.exceptions import AuthenticationError, ConfigurationError
from llm_proxy.gateway.types import Principal

logger = logging.getLogger(__name__)

# (token, audience) -> verified claims; raises on any verification failure
TokenVerifier = Callable[[str, str], dict]

_BEARER_PREFIX = "Bearer "


def verify_google_id_token(token: str, audience: str) -> dict:
    """Verify signature, expiry and audience of a Google-issued ID token."""
    return id_token.verify_oauth2_token(token, google_requests.Request(), audience=audience)


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise AuthenticationError("Missing or invalid Authorization header")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise AuthenticationError("Missing or invalid Authorization header")
    return token


class IdentityGate:
    """Turn an Authorization header into a Principal, or reject with 401.

    Every call re-verifies the token; nothing is cached between requests.
    The gate fails closed: a misconfigured or failing verifier denies.
    """

    def __init__(self, audience: Callable[[], str], verifier: TokenVerifier = verify_google_id_token):
        self._audience = audience
        self._verifier = verifier

    async def authenticate(self, authorization: str | None) -> Principal:
        token = extract_bearer_token(authorization)

        try:
            audience = self._audience()
            # google-auth fetches signing certs with a blocking HTTP call
            claims = await asyncio.to_thread(self._verifier, token, audience)
        except ConfigurationError as e:
            logger.error("Auth error: %s", e.message)
            raise AuthenticationError(f"Invalid ID token: {e.message}") from e
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("Auth error: %s", message)
            raise AuthenticationError(f"Invalid ID token: {message}") from e

        if not claims:
            logger.warning("Auth error: verifier returned no claims")
            raise AuthenticationError("Invalid ID token: No payload")

        return Principal(
            subject_id=claims.get("sub") or "",
            email=claims.get("email") or "",
        )
