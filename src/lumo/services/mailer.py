"""Invite email delivery.

Emails are sent from a worker thread inside a background task. Delivery
problems are logged and never reach the request that triggered them.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from lumo.core.settings import Settings, settings
from lumo.utils.tasks import fire_and_forget

logger = logging.getLogger(__name__)

_PERMISSION_LABELS = {
    "edit": "edit",
    "comment": "comment on",
    "view": "view",
}


class InviteMailer:
    """Sends "you were invited to a draft" emails over SMTP."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or settings

    @property
    def enabled(self) -> bool:
        return self._config.email_enabled

    def dispatch_invite(
        self,
        *,
        to_email: str,
        inviter_name: str,
        post_title: str | None,
        post_id: str,
        permission: str,
    ) -> None:
        """Queue an invite email without waiting for it."""
        fire_and_forget(
            self.send_invite(
                to_email=to_email,
                inviter_name=inviter_name,
                post_title=post_title,
                post_id=post_id,
                permission=permission,
            ),
            label=f"invite email to {to_email}",
        )

    async def send_invite(
        self,
        *,
        to_email: str,
        inviter_name: str,
        post_title: str | None,
        post_id: str,
        permission: str,
    ) -> bool:
        """Send one invite email.

        Returns:
            True when the relay accepted the message, False when sending is
            disabled or failed.
        """
        if not self.enabled:
            logger.warning("SMTP is not configured; skipping invite email to %s", to_email)
            return False

        message = self.build_invite_message(
            to_email=to_email,
            inviter_name=inviter_name,
            post_title=post_title,
            post_id=post_id,
            permission=permission,
        )
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send invite email to %s: %s", to_email, exc)
            return False

        logger.info("Invite email sent to %s for post %s", to_email, post_id)
        return True

    def build_invite_message(
        self,
        *,
        to_email: str,
        inviter_name: str,
        post_title: str | None,
        post_id: str,
        permission: str,
    ) -> MIMEMultipart:
        """Render the invite as a plain-text and HTML multipart message."""
        title = post_title or "Untitled"
        action = _PERMISSION_LABELS.get(permission, permission)
        link = f"{self._config.frontend_url.rstrip('/')}/editor/{post_id}"

        message = MIMEMultipart("alternative")
        message["Subject"] = f'{inviter_name} invited you to collaborate on "{title}"'
        message["From"] = self._config.email_from
        message["To"] = to_email

        text = (
            f'{inviter_name} invited you to {action} the draft "{title}" on '
            f"{self._config.app_name}.\n\nOpen it here: {link}\n"
        )
        html = (
            f"<p><strong>{escape(inviter_name)}</strong> invited you to {escape(action)} "
            f"the draft <em>{escape(title)}</em> on {escape(self._config.app_name)}.</p>"
            f'<p><a href="{escape(link)}">Open the draft</a></p>'
        )
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))
        return message

    def _deliver(self, message: MIMEMultipart) -> None:
        host = self._config.smtp_host
        if not host:
            raise smtplib.SMTPException("SMTP host is not configured")

        with smtplib.SMTP(
            host,
            self._config.smtp_port,
            timeout=self._config.smtp_timeout_seconds,
        ) as smtp:
            if self._config.smtp_use_tls:
                smtp.starttls()
            if self._config.smtp_username and self._config.smtp_password:
                smtp.login(self._config.smtp_username, self._config.smtp_password)
            smtp.send_message(message)


class _InviteMailerSingleton:
    """Singleton wrapper for InviteMailer."""

    _instance: InviteMailer | None = None

    @classmethod
    def get_instance(cls) -> InviteMailer:
        """Get or create the singleton InviteMailer instance."""
        if cls._instance is None:
            cls._instance = InviteMailer()
        return cls._instance


def get_mailer() -> InviteMailer:
    """Return a singleton invite mailer instance."""
    return _InviteMailerSingleton.get_instance()
