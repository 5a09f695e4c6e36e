# core/notifier.py
import asyncio
import logging
from html import escape
from typing import Protocol
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from core.entities import Notification
from util.errors import NotificationFailed
from util.timing import timed

logger = logging.getLogger(__name__)

FOOTER = "This is an automated notification from failure-uploader."


class Notifier(Protocol):
    async def send(self, notification: Notification) -> None:
        """Attempt delivery once. Raise NotificationFailed when it did not go out."""
        ...


class NoopNotifier:
    """Stand-in when no mail channel is configured; callers never branch on it."""

    async def send(self, notification: Notification) -> None:
        logger.debug("notify.skipped bundle=%s reason=disabled", notification.bundle_id)


def render_subject(n: Notification) -> str:
    return f"[{n.project}/{n.environment}] Failed Request Captured: {n.bundle_id}"


def render_text(n: Notification) -> str:
    return (
        "A failed network request has been captured and uploaded.\n\n"
        f"Failure ID: {n.bundle_id}\n"
        f"Project: {n.project}\n"
        f"Environment: {n.environment}\n\n"
        "Request Details:\n"
        f"- Method: {n.request_method}\n"
        f"- URL: {n.request_url}\n\n"
        "Client:\n"
        f"- App Version: {n.app_version}\n"
        f"- Platform: {n.platform}\n\n"
        "Download envelope:\n"
        f"{n.envelope_url or '(link unavailable)'}\n\n"
        f"---\n{FOOTER}\n"
    )


_HTML_STYLE = (
    "body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;"
    " line-height: 1.6; color: #333; }\n"
    ".container { max-width: 600px; margin: 0 auto; padding: 20px; }\n"
    ".header { background: #f44336; color: white; padding: 20px; border-radius: 8px 8px 0 0; }\n"
    ".content { background: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px; }\n"
    ".field { margin-bottom: 10px; }\n"
    ".label { font-weight: bold; color: #666; }\n"
    ".button { display: inline-block; background: #2196F3; color: white; padding: 12px 24px;"
    " text-decoration: none; border-radius: 4px; margin-top: 15px; }\n"
    ".footer { margin-top: 20px; font-size: 12px; color: #999; }\n"
)


def _field(label: str, value: str) -> str:
    return (
        f'<div class="field"><span class="label">{label}:</span> '
        f'<span class="value">{escape(value)}</span></div>'
    )


def render_html(n: Notification) -> str:
    link = (
        f'<a href="{escape(n.envelope_url, quote=True)}" class="button">Download Envelope</a>'
        if n.envelope_url
        else "<p>Envelope link unavailable.</p>"
    )
    return (
        "<!DOCTYPE html>\n<html>\n"
        f"<head><style>\n{_HTML_STYLE}</style></head>\n"
        '<body>\n<div class="container">\n'
        '<div class="header">\n'
        '<h2 style="margin:0;">Failed Request Captured</h2>\n'
        f'<p style="margin:5px 0 0 0;">{escape(n.project)} / {escape(n.environment)}</p>\n'
        "</div>\n"
        '<div class="content">\n'
        f"{_field('Failure ID', n.bundle_id)}\n"
        f"{_field('Project', n.project)}\n"
        f"{_field('Environment', n.environment)}\n"
        "<h3>Request Details</h3>\n"
        f"{_field('Method', n.request_method)}\n"
        f"{_field('URL', n.request_url)}\n"
        "<h3>Client</h3>\n"
        f"{_field('App Version', n.app_version)}\n"
        f"{_field('Platform', n.platform)}\n"
        f"{link}\n"
        "</div>\n"
        f'<div class="footer">{FOOTER}</div>\n'
        "</div>\n</body>\n</html>"
    )


class SesNotifier:
    """Mails the bundle owner through Amazon SES."""

    def __init__(self, client: BaseClient, sender: str, recipient: str) -> None:
        self._client = client
        self._sender = sender
        self._recipient = recipient

    async def send(self, notification: Notification) -> None:
        message = {
            "Subject": {"Data": render_subject(notification), "Charset": "UTF-8"},
            "Body": {
                "Text": {"Data": render_text(notification), "Charset": "UTF-8"},
                "Html": {"Data": render_html(notification), "Charset": "UTF-8"},
            },
        }
        try:
            with timed(logger, "notify.ses", bundle=notification.bundle_id):
                await asyncio.to_thread(
                    self._client.send_email,
                    Source=self._sender,
                    Destination={"ToAddresses": [self._recipient]},
                    Message=message,
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error(
                "notify.ses.error bundle=%s err=%s",
                notification.bundle_id,
                type(exc).__name__,
            )
            raise NotificationFailed(notification.bundle_id) from exc

        logger.info(
            "notify.sent bundle=%s to=%s", notification.bundle_id, self._recipient
        )
