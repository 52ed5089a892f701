"""Rate limit domain settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class RateLimitSettings(InfrastructureSettings):
    """Sliding window configuration for every rate limit domain.

    All domains share the same algorithm; only the window, the limit and the
    Redis key prefix differ.

    Environment Variables:
        TENANT_RATE_LIMIT_WINDOW_MS / TENANT_RATE_LIMIT_MAX_REQUESTS
        USER_RATE_LIMIT_WINDOW_MS / USER_RATE_LIMIT_MAX_REQUESTS
        NOTIFICATION_RATE_LIMIT_WINDOW_MS / NOTIFICATION_RATE_LIMIT_MAX_REQUESTS
        TENANT_CREATION_RATE_LIMIT_WINDOW_MS / TENANT_CREATION_RATE_LIMIT_MAX_REQUESTS
        TENANT_JOINING_RATE_LIMIT_WINDOW_MS / TENANT_JOINING_RATE_LIMIT_MAX_REQUESTS
        INVITATION_ACCEPTANCE_RATE_LIMIT_WINDOW_MS / INVITATION_ACCEPTANCE_RATE_LIMIT_MAX_REQUESTS
    """

    tenant_window_ms: int = Field(
        default=60000,
        alias="TENANT_RATE_LIMIT_WINDOW_MS",
        description="Window for notifications per tenant (milliseconds)",
    )
    tenant_max_requests: int = Field(
        default=100,
        alias="TENANT_RATE_LIMIT_MAX_REQUESTS",
        description="Notifications allowed per tenant per window",
    )
    user_window_ms: int = Field(
        default=60000,
        alias="USER_RATE_LIMIT_WINDOW_MS",
        description="Window for notifications per user (milliseconds)",
    )
    user_max_requests: int = Field(
        default=50,
        alias="USER_RATE_LIMIT_MAX_REQUESTS",
        description="Notifications allowed per user per window",
    )
    notification_window_ms: int = Field(
        default=3600000,
        alias="NOTIFICATION_RATE_LIMIT_WINDOW_MS",
        description="Window for notifications per user and category (milliseconds)",
    )
    notification_max_requests: int = Field(
        default=10,
        alias="NOTIFICATION_RATE_LIMIT_MAX_REQUESTS",
        description="Notifications allowed per user and category per window",
    )
    tenant_creation_window_ms: int = Field(
        default=3600000,
        alias="TENANT_CREATION_RATE_LIMIT_WINDOW_MS",
        description="Window for tenant creation (milliseconds)",
    )
    tenant_creation_max_requests: int = Field(
        default=3,
        alias="TENANT_CREATION_RATE_LIMIT_MAX_REQUESTS",
        description="Tenant creations allowed per user per window",
    )
    tenant_joining_window_ms: int = Field(
        default=3600000,
        alias="TENANT_JOINING_RATE_LIMIT_WINDOW_MS",
        description="Window for tenant joining (milliseconds)",
    )
    tenant_joining_max_requests: int = Field(
        default=10,
        alias="TENANT_JOINING_RATE_LIMIT_MAX_REQUESTS",
        description="Tenant joins allowed per user per window",
    )
    invitation_acceptance_window_ms: int = Field(
        default=3600000,
        alias="INVITATION_ACCEPTANCE_RATE_LIMIT_WINDOW_MS",
        description="Window for invitation acceptance (milliseconds)",
    )
    invitation_acceptance_max_requests: int = Field(
        default=10,
        alias="INVITATION_ACCEPTANCE_RATE_LIMIT_MAX_REQUESTS",
        description="Invitation acceptances allowed per user per window",
    )
