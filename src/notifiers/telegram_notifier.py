# src/notifiers/telegram_notifier.py

"""Minimal Telegram Bot API client for outbound notifications."""

import logging
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings

logger = logging.getLogger("fuel_monitor.notifier")


class NotificationError(Exception):
    """A message could not be delivered."""


class TelegramNotifier:
    """Sends Markdown messages to one chat through the Bot API."""

    def __init__(
        self,
        token: str | None = None,
        chat_id: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.settings = Settings()
        self.token = token or self.settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id or self.settings.TELEGRAM_CHAT_ID
        self.timeout = timeout or self.settings.NOTIFY_TIMEOUT
        self.session = curl_requests.Session()

    def _endpoint(self, method: str) -> str:
        return f"{self.settings.TELEGRAM_API_URL}/bot{self.token}/{method}"

    def _call(
        self, method: str, payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """POST one Bot API method and return its ``result`` payload."""
        try:
            resp = self.session.post(
                self._endpoint(method),
                json=payload or {},
                timeout=self.timeout,
            )
        except Exception as exc:
            raise NotificationError(
                f"Telegram {method} request failed: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise NotificationError(
                f"Telegram {method} returned HTTP {resp.status_code}: "
                f"{resp.text[:200]}"
            )
        body: dict[str, Any] = resp.json()
        if not body.get("ok", False):
            raise NotificationError(
                f"Telegram {method} rejected: "
                f"{body.get('description', 'unknown error')}"
            )
        result: dict[str, Any] = body.get("result") or {}
        return result

    def send(self, text: str) -> None:
        """Deliver *text* to the configured chat.

        Raises:
            NotificationError: On transport failure or API rejection.
        """
        self._call(
            "sendMessage",
            {
                "chat_id": self.chat_id,
                "text": text,
                "parse_mode": "Markdown",
                "disable_web_page_preview": True,
            },
        )
        logger.info(
            "Notification sent to chat %s (%d chars)",
            self.chat_id,
            len(text),
        )

    def check(self) -> str:
        """Verify the token with ``getMe``; returns the bot username."""
        result = self._call("getMe")
        return str(result.get("username", ""))
