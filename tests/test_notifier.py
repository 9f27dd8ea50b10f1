"""Tests for owner notification sinks."""

import pytest
import requests

from notifications.notifier import LogNotifier, WebhookNotifier, create_notifier


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestWebhookNotifier:
    def test_posts_title_and_content(self, monkeypatch):
        calls = []

        def fake_post(url, json=None, timeout=None):
            calls.append({"url": url, "json": json, "timeout": timeout})
            return FakeResponse()

        monkeypatch.setattr(requests, "post", fake_post)
        notifier = WebhookNotifier("https://hooks.example.com/alert", timeout=5)

        assert notifier.send("⚠ 1 Critical", "body") is True
        assert calls == [{
            "url": "https://hooks.example.com/alert",
            "json": {"title": "⚠ 1 Critical", "content": "body"},
            "timeout": 5,
        }]

    def test_http_error_raises(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(500))
        with pytest.raises(requests.HTTPError):
            WebhookNotifier("https://hooks.example.com/alert").send("t", "c")


class TestCreateNotifier:
    def test_webhook_when_configured(self):
        notifier = create_notifier("https://hooks.example.com/alert")
        assert isinstance(notifier, WebhookNotifier)

    def test_log_by_default(self):
        notifier = create_notifier("")
        assert isinstance(notifier, LogNotifier)
        assert notifier.send("title", "line one\n\nline two") is True
