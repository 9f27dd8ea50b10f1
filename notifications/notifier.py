# Owner Notifications
# Delivery sinks for critical-discrepancy alerts. The caller decides whether
# to send; a sink only delivers.

import requests

from config import ALERT_TIMEOUT_SECONDS, ALERT_WEBHOOK_URL
from utils.logger import logger


class LogNotifier:
    """Writes alerts to the application log. Used when no webhook is configured."""

    def send(self, title: str, content: str) -> bool:
        logger.warning(f"📣 NOTIFY: {title}")
        for line in content.splitlines():
            if line.strip():
                logger.warning(f"   └─ {line}")
        return True


class WebhookNotifier:
    """Posts alerts as JSON ``{"title", "content"}`` to a webhook endpoint."""

    def __init__(self, url: str, timeout: float = ALERT_TIMEOUT_SECONDS):
        self.url = url
        self.timeout = timeout

    def send(self, title: str, content: str) -> bool:
        resp = requests.post(
            self.url,
            json={"title": title, "content": content},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        logger.info(f"📣 NOTIFY: webhook accepted alert ({resp.status_code})")
        return True


def create_notifier(url: str = ALERT_WEBHOOK_URL):
    """Create the configured notification sink."""
    if url:
        return WebhookNotifier(url)
    return LogNotifier()
