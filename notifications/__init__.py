# Notifications Module

from notifications.notifier import LogNotifier, WebhookNotifier, create_notifier

__all__ = [
    "LogNotifier",
    "WebhookNotifier",
    "create_notifier",
]
