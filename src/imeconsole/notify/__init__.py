"""Notification bridge module."""
from __future__ import annotations

from imeconsole.notify.bridge import NotificationBridge

__all__ = ["NotificationBridge"]
