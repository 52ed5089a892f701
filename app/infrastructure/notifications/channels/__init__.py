"""Notification channel implementations."""

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel
from infrastructure.notifications.channels.in_app import InAppChannel
from infrastructure.notifications.channels.sms import SmsChannel

__all__ = ["NotificationChannel", "InAppChannel", "EmailChannel", "SmsChannel"]
