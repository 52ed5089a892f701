"""Explicit tenant context.

Every service call that reads or writes tenant data receives a TenantContext
argument. There is no request-scoped singleton; callers build the context
from whatever authenticated the request (or from a queue job payload) and
pass it down.
"""

from dataclasses import dataclass
from typing import Optional

from infrastructure.notifications.exceptions import TenantContextRequiredError


@dataclass(frozen=True)
class TenantContext:
    """Tenant scope for a single call.

    Attributes:
        tenant_id: Tenant whose rows the call may touch
        user_id: Optional acting user (for audit trails)
    """

    tenant_id: str
    user_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "TenantContext":
        """Build a context from a job payload carrying ``tenant_id``."""
        return cls(tenant_id=payload.get("tenant_id") or "", user_id=payload.get("user_id"))


def require_tenant(tenant: Optional[TenantContext]) -> str:
    """Return the tenant id or raise before any side effect happens.

    Args:
        tenant: Context passed by the caller

    Returns:
        The non-blank tenant id

    Raises:
        TenantContextRequiredError: If the context is missing or blank
    """
    if tenant is None or not tenant.tenant_id or not tenant.tenant_id.strip():
        raise TenantContextRequiredError()
    return tenant.tenant_id
