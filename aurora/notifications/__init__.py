"""Transient notice (toast) delivery."""

from aurora.notifications.channels import (
    LogChannel,
    Notice,
    NoticeLevel,
    NotificationChannel,
)
from aurora.notifications.router import NotificationRouter

__all__ = [
    "LogChannel",
    "Notice",
    "NoticeLevel",
    "NotificationChannel",
    "NotificationRouter",
]
