"""Notification adapters."""

from trend_monitor.adapters.notifications.email_notifier import EmailNotifier

__all__ = ["EmailNotifier"]
