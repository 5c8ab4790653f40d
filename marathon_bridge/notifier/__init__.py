"""Notifier module."""

from .notifier import INotifier, Notifier, NotificationHandler

__all__ = ["INotifier", "Notifier", "NotificationHandler"]
