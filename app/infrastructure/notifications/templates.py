"""Notification templates and content helpers.

Templates use ``{{ variable }}`` placeholders. Placeholders without a value
render as an empty string. Tenant templates take precedence over global
templates (``tenant_id=None``) for the same category and channel.

Usage:
    from infrastructure.notifications.templates import TemplateService

    templates = TemplateService(store)
    rendered = await templates.render_template(template_id, {"userName": "Ada"})
    rendered.html, rendered.text
"""

import html
import re
from typing import Any, Dict, List, Optional, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import (
    NotificationNotFoundError,
    TemplateRenderError,
)
from infrastructure.notifications.models import RenderedContent
from infrastructure.persistence.models import (
    ChannelType,
    NotificationTemplate,
    utc_now,
)
from infrastructure.persistence.store import NotificationStore

logger = get_module_logger()

PLACEHOLDER = re.compile(r"{{\s*([\w.]+)\s*}}")
LEFTOVER_PLACEHOLDER = re.compile(r"{{[^}]*}}")
HTML_TAG = re.compile(r"<[^>]*>")
WHITESPACE = re.compile(r"\s+")

SMS_MAX_LENGTH = 150


def substitute_variables(body: str, variables: Dict[str, Any]) -> str:
    """Replace ``{{ key }}`` placeholders; unknown or empty values become ""."""

    def replace(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return str(value) if value else ""

    return LEFTOVER_PLACEHOLDER.sub("", PLACEHOLDER.sub(replace, body))


def strip_html(content: str) -> str:
    """Plain text from HTML: tags removed, entities decoded, whitespace collapsed."""
    text = html.unescape(HTML_TAG.sub("", content))
    return WHITESPACE.sub(" ", text).strip()


def truncate(text: str, max_length: int = SMS_MAX_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def convert_message_to_html(message: str) -> str:
    """Wrap a plain-text message in a minimal HTML email body."""
    body = message.replace("\n", "<br>")
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <head>\n"
        '    <meta charset="utf-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        "    <title>Notification</title>\n"
        "  </head>\n"
        '  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">\n'
        '    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">\n'
        f"      {body}\n"
        "    </div>\n"
        "  </body>\n"
        "</html>\n"
    )


def validate_template_variables(
    template: NotificationTemplate, variables: Dict[str, Any]
) -> Tuple[bool, List[str]]:
    """Check that every variable the template declares was provided.

    Returns:
        (is_valid, missing_variables)
    """
    missing = [name for name in template.variables if name not in variables]
    return not missing, missing


class TemplateService:
    def __init__(self, store: NotificationStore):
        self.store = store

    async def get_template(
        self, category: str, channel: ChannelType, tenant_id: Optional[str] = None
    ) -> Optional[NotificationTemplate]:
        """Newest active template, tenant-specific first, then global."""
        if tenant_id:
            template = await self.store.find_active_template(tenant_id, category, channel)
            if template is not None:
                return template
        return await self.store.find_active_template(None, category, channel)

    async def render_template(
        self, template_id: str, variables: Optional[Dict[str, Any]] = None
    ) -> RenderedContent:
        """Render a stored template.

        Raises:
            TemplateRenderError: If the template is missing or inactive
        """
        template = await self.store.get_template(template_id)
        if template is None or not template.is_active:
            raise TemplateRenderError(f"Template {template_id} not found or inactive")
        return self._render(template, variables or {})

    async def render_category_template(
        self,
        tenant_id: Optional[str],
        category: str,
        channel: ChannelType,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Optional[RenderedContent]:
        """Render the active template for a category, or None if there is none."""
        template = await self.get_template(category, channel, tenant_id)
        if template is None:
            return None
        return self._render(template, variables or {})

    def _render(
        self, template: NotificationTemplate, variables: Dict[str, Any]
    ) -> RenderedContent:
        valid, missing = validate_template_variables(template, variables)
        if not valid:
            logger.warning(
                "template_variables_missing", template_id=template.id, missing=missing
            )
        body = substitute_variables(template.template_body, variables)
        subject = (
            substitute_variables(template.subject, variables)
            if template.subject
            else None
        )
        return RenderedContent(subject=subject, html=body, text=strip_html(body))

    async def create_template(
        self,
        category: str,
        channel: ChannelType,
        template_body: str,
        tenant_id: Optional[str] = None,
        subject: Optional[str] = None,
        variables: Optional[List[str]] = None,
        is_active: bool = True,
    ) -> NotificationTemplate:
        template = await self.store.create_template(
            NotificationTemplate(
                tenant_id=tenant_id,
                category=category,
                channel=channel,
                subject=subject,
                template_body=template_body,
                variables=variables or [],
                is_active=is_active,
            )
        )
        logger.info(
            "template_created",
            template_id=template.id,
            tenant_id=tenant_id,
            category=category,
            channel=channel.value,
        )
        return template

    async def update_template(self, template_id: str, **changes: Any) -> NotificationTemplate:
        """Update template fields.

        Raises:
            NotificationNotFoundError: If the template does not exist
        """
        changes.pop("id", None)
        changes["updated_at"] = utc_now()
        return await self.store.update_template(template_id, **changes)

    async def delete_template(self, template_id: str, hard: bool = False) -> bool:
        """Deactivate a template, or remove it when ``hard`` is set.

        Raises:
            NotificationNotFoundError: If the template does not exist
        """
        if hard:
            if not await self.store.delete_template(template_id):
                raise NotificationNotFoundError(f"Template {template_id} not found")
            return True
        await self.store.update_template(template_id, is_active=False)
        return True

    async def get_templates_for_tenant(
        self,
        tenant_id: str,
        category: Optional[str] = None,
        channel: Optional[ChannelType] = None,
    ) -> List[NotificationTemplate]:
        """Active tenant and global templates, tenant-specific first."""
        templates = [
            t
            for t in await self.store.list_templates(tenant_id)
            if t.is_active
            and (category is None or t.category == category)
            and (channel is None or t.channel == channel)
        ]
        return sorted(
            templates, key=lambda t: (t.tenant_id is None, -t.updated_at.timestamp())
        )
