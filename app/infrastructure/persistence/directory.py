"""User directory consumed by the notification engine.

Tenant and user management live elsewhere; the engine only needs contact
details for a user and the list of users in a tenant.
"""

import asyncio
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel

from infrastructure.operations import OperationResult


class UserContact(BaseModel):
    user_id: str
    tenant_id: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email or self.user_id


class UserDirectory(Protocol):
    async def get_user(self, tenant_id: str, user_id: str) -> Optional[UserContact]:
        """Return the user's contact details, or None if not in the tenant."""
        ...

    async def list_tenant_users(self, tenant_id: str) -> List[str]:
        """Return the ids of every user in the tenant."""
        ...


async def resolve_email(
    directory: UserDirectory, tenant_id: str, user_id: str
) -> OperationResult:
    """Look up a user's email address.

    Returns:
        OperationResult with the address in ``data``, or NOT_FOUND
    """
    user = await directory.get_user(tenant_id, user_id)
    if user is None:
        return OperationResult.not_found("User not found", error_code="USER_NOT_FOUND")
    if not user.email:
        return OperationResult.not_found(
            "User email not found", error_code="EMAIL_NOT_FOUND"
        )
    return OperationResult.success(data=user.email)


class InMemoryUserDirectory:
    """Dict-backed UserDirectory for development and tests."""

    def __init__(self, users: Optional[List[UserContact]] = None) -> None:
        self._users: Dict[tuple, UserContact] = {}
        self._lock = asyncio.Lock()
        for user in users or []:
            self._users[(user.tenant_id, user.user_id)] = user

    async def add_user(self, user: UserContact) -> None:
        async with self._lock:
            self._users[(user.tenant_id, user.user_id)] = user

    async def get_user(self, tenant_id: str, user_id: str) -> Optional[UserContact]:
        async with self._lock:
            user = self._users.get((tenant_id, user_id))
            return user.model_copy() if user else None

    async def list_tenant_users(self, tenant_id: str) -> List[str]:
        async with self._lock:
            return [uid for (tid, uid) in self._users if tid == tenant_id]
