"""Payload validation shared by every channel.

Pure functions with no I/O. Each returns a list of problems so channels can
log why a payload was rejected; an empty list means valid.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from infrastructure.notifications.models import NotificationPayload

MAX_SMS_LENGTH = 1600

REQUIRED_FIELDS = ("tenant_id", "user_id", "category", "type", "title", "message")
STRING_FIELDS = ("tenant_id", "user_id", "category", "title", "message")

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
PHONE_STRIP_PATTERN = re.compile(r"[\s\-()]")
PHONE_OVERRIDE_KEYS = ("phone_number", "phoneNumber", "phone")


def base_payload_errors(
    payload: Optional[NotificationPayload], now: Optional[datetime] = None
) -> List[str]:
    """Check required fields, blank strings and expiry."""
    if payload is None:
        return ["Notification payload is missing"]

    errors = []
    for name in REQUIRED_FIELDS:
        if not getattr(payload, name):
            errors.append(f"Missing required field: {name}")
    for name in STRING_FIELDS:
        value = getattr(payload, name)
        if isinstance(value, str) and value and not value.strip():
            errors.append(f"Field {name} cannot be empty")

    if payload.expires_at is not None:
        now = now or datetime.now(timezone.utc)
        expires_at = payload.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= now:
            errors.append("Notification expiry date is in the past")
    return errors


def email_payload_errors(payload: NotificationPayload) -> List[str]:
    errors = []
    if payload.template_id and payload.template_variables is not None:
        if not isinstance(payload.template_variables, dict):
            errors.append("Template variables must be an object")
    return errors


def is_valid_email(address: Optional[str]) -> bool:
    if not address:
        return False
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def normalize_phone(phone: str) -> str:
    """Strip spaces, hyphens and parentheses."""
    return PHONE_STRIP_PATTERN.sub("", phone)


def is_valid_phone(phone: Optional[str]) -> bool:
    """E.164 check on the normalized number, 8 to 16 characters, no letters."""
    if not phone:
        return False
    if re.search(r"[A-Za-z]", phone):
        return False
    cleaned = normalize_phone(phone)
    if len(cleaned) < 8 or len(cleaned) > 16:
        return False
    return bool(E164_PATTERN.match(cleaned))


def phone_override(payload: NotificationPayload) -> Optional[str]:
    """Destination phone supplied in the payload data, if any."""
    for key in PHONE_OVERRIDE_KEYS:
        value = payload.data.get(key)
        if value:
            return str(value)
    return None


def format_sms_message(title: Optional[str], message: Optional[str]) -> str:
    """``"{title}: {message}"``, or just the message when they are equal."""
    title = title or ""
    message = message or ""
    if not title or title == message:
        return message
    return f"{title}: {message}"


def sms_payload_errors(payload: NotificationPayload) -> List[str]:
    errors = []
    formatted = format_sms_message(payload.title, payload.message)
    if len(formatted) > MAX_SMS_LENGTH:
        errors.append(
            f"SMS message too long: {len(formatted)} characters (max {MAX_SMS_LENGTH})"
        )
    override = phone_override(payload)
    if override is not None and not is_valid_phone(override):
        errors.append("Invalid phone number format")
    return errors
