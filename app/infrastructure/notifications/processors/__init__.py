"""Queue job processors for the asynchronous delivery channels."""

from infrastructure.notifications.processors.email import EmailJobProcessor
from infrastructure.notifications.processors.sms import SmsJobProcessor

__all__ = ["EmailJobProcessor", "SmsJobProcessor"]
