"""Tenant scoping primitives."""

from infrastructure.tenancy.context import TenantContext, require_tenant

__all__ = ["TenantContext", "require_tenant"]
