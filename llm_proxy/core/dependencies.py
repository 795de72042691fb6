from functools import lru_cache

from fastapi import Depends, Header

from llm_proxy.core.config import Settings, settings
from llm_proxy.core.quota import QuotaGate, get_quota_gate
from llm_proxy.core.security import IdentityGate
from llm_proxy.gateway.types import Principal


def get_settings() -> Settings:
    return settings


@lru_cache
def get_identity_gate() -> IdentityGate:
    # Audience is resolved per request so a missing GOOGLE_CLIENT_ID only affects auth
    return IdentityGate(audience=lambda: settings.require("google_client_id"))


async def get_current_principal(
    authorization: str | None = Header(None, description="Bearer <Google ID token>"),
    gate: IdentityGate = Depends(get_identity_gate),
    app_settings: Settings = Depends(get_settings),
) -> Principal | None:
    """Identity gate. Returns None on deployments with auth disabled."""
    if not app_settings.auth_enabled:
        return None
    return await gate.authenticate(authorization)


async def enforce_quota(
    principal: Principal | None = Depends(get_current_principal),
    gate: QuotaGate = Depends(get_quota_gate),
) -> Principal | None:
    """Quota gate, always evaluated after the identity gate."""
    if principal is not None:
        await gate.check(principal)
    return principal
