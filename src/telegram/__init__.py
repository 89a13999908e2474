"""Telegram channel mirror.

Note: Router is not exported here to avoid circular imports.
"""

from .client import TelegramClient, TelegramError
from .models import ChannelInfo, TelegramPost
from .service import TelegramService


__all__ = [
    "ChannelInfo",
    "TelegramClient",
    "TelegramError",
    "TelegramPost",
    "TelegramService",
]
