"""Notification modules."""
from .hub import NotificationHub
from .telegram import TelegramNotifier

__all__ = ["NotificationHub", "TelegramNotifier"]
