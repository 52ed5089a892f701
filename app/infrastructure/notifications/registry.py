"""Channel registry.

Runtime lookup from channel type to channel instance, populated once at
startup by the bootstrap wiring.
"""

from typing import Dict, List

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.exceptions import ChannelNotRegisteredError
from infrastructure.persistence.models import ChannelType

logger = get_module_logger()


class ChannelRegistry:
    def __init__(self) -> None:
        self._channels: Dict[ChannelType, NotificationChannel] = {}

    def register_channel(self, channel: NotificationChannel) -> None:
        channel_type = channel.channel_type
        if channel_type in self._channels:
            logger.warning("channel_registration_overridden", channel=channel_type.value)
        self._channels[channel_type] = channel
        logger.info("channel_registered", channel=channel_type.value)

    def get_channel(self, channel_type: ChannelType) -> NotificationChannel:
        """Return the channel for a type.

        Raises:
            ChannelNotRegisteredError: If nothing is registered for the type
        """
        channel = self._channels.get(channel_type)
        if channel is None:
            raise ChannelNotRegisteredError(channel_type.value)
        return channel

    def is_channel_registered(self, channel_type: ChannelType) -> bool:
        return channel_type in self._channels

    def get_available_channels(self) -> List[ChannelType]:
        return list(self._channels.keys())

    def get_all_channels(self) -> List[NotificationChannel]:
        return list(self._channels.values())

    def unregister_channel(self, channel_type: ChannelType) -> bool:
        removed = self._channels.pop(channel_type, None) is not None
        if removed:
            logger.info("channel_unregistered", channel=channel_type.value)
        return removed

    def clear_channels(self) -> None:
        self._channels.clear()

    def count(self) -> int:
        return len(self._channels)
