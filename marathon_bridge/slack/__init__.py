"""Slack delivery module."""

from .handler import ISlackHandler, SlackHandler

__all__ = ["ISlackHandler", "SlackHandler"]
