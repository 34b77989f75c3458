"""Admin email notifier for flagged chat queries."""
import asyncio
import html
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from config import (
    ADMIN_EMAIL,
    ADMIN_APP_PASSWORD,
    SMTP_HOST,
    SMTP_PORT,
    SMTP_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

UNKNOWN_CONTACT = "Unknown User"
ALERT_SUBJECT = "BelowMSRP Chatbot: Unrelated Query Alert"


class AdminNotifier:
    """Sends off-topic query alerts to the fixed admin mailbox over SMTP."""

    def __init__(
        self,
        admin_email: Optional[str] = None,
        app_password: Optional[str] = None,
        smtp_host: str = SMTP_HOST,
        smtp_port: int = SMTP_PORT,
        timeout: float = SMTP_TIMEOUT_SECONDS,
    ):
        self.admin_email = admin_email or ADMIN_EMAIL
        self.app_password = app_password or ADMIN_APP_PASSWORD
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout = timeout

        if not self.admin_email or not self.app_password:
            logger.warning("ADMIN_EMAIL or ADMIN_APP_PASSWORD not set; admin alerts will not be delivered")
        else:
            logger.info(f"AdminNotifier initialized for {self.admin_email} via {smtp_host}:{smtp_port}")

    async def notify(
        self,
        contact_email: Optional[str],
        user_message: str,
        timestamp: datetime,
    ) -> bool:
        """
        Send an alert email to the admin.

        Args:
            contact_email: The visitor's saved email, or None if not provided
            user_message: The message that triggered the alert
            timestamp: When the message was processed

        Returns:
            True if the email was handed to the SMTP server, False otherwise.
            Delivery failures are logged and never raised.
        """
        contact = contact_email or UNKNOWN_CONTACT

        if not self.admin_email or not self.app_password:
            logger.error("Admin alert skipped: SMTP credentials are not configured")
            return False

        message = self.build_message(contact, user_message, timestamp)

        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send admin email: {e}", exc_info=True)
            return False

        logger.info(f"Admin email sent successfully for contact {contact}")
        return True

    def build_message(self, contact: str, user_message: str, timestamp: datetime) -> MIMEMultipart:
        """Build the multipart alert email."""
        message = MIMEMultipart("alternative")
        message["From"] = self.admin_email
        message["To"] = self.admin_email
        message["Subject"] = ALERT_SUBJECT

        message.attach(MIMEText(build_alert_text(contact, user_message, timestamp), "plain"))
        message.attach(MIMEText(build_alert_html(contact, user_message, timestamp), "html"))
        return message

    def _send(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            server.login(self.admin_email, self.app_password)
            server.send_message(message)


def _format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y-%m-%d %H:%M:%S")


def build_alert_text(contact: str, user_message: str, timestamp: datetime) -> str:
    """Plain-text body of the alert email."""
    return (
        "PRIORITY ALERT\n\n"
        "A user query has been flagged by the BelowMSRP chatbot as falling outside "
        "the defined service parameters.\n\n"
        f"User email: {contact}\n"
        f"User message: {user_message}\n"
        f"Timestamp: {_format_timestamp(timestamp)}\n\n"
        "Please evaluate this query and contact the user if necessary.\n"
    )


def build_alert_html(contact: str, user_message: str, timestamp: datetime) -> str:
    """
    HTML body of the alert email.

    All user-supplied values are escaped before interpolation.
    """
    contact = html.escape(contact)
    user_message = html.escape(user_message).replace("\n", "<br>")
    when = html.escape(_format_timestamp(timestamp))

    label_style = (
        "font-weight:600;color:#6b7280;padding:16px 20px;background:#f3f4f6;width:160px;"
        "font-size:11px;text-transform:uppercase;letter-spacing:0.8px;vertical-align:top;"
    )
    value_style = "color:#1f2937;padding:16px 20px;font-size:14px;line-height:1.7;word-break:break-word;"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{ALERT_SUBJECT}</title>
</head>
<body style="margin:0;padding:40px 20px;background:#f5f5f5;font-family:-apple-system,'Segoe UI',Roboto,Arial,sans-serif;">
  <table role="presentation" width="100%" style="max-width:680px;margin:0 auto;background:#ffffff;border:1px solid #e5e7eb;border-radius:8px;border-collapse:collapse;">
    <tr>
      <td style="background:#2563eb;padding:40px 45px;">
        <div style="font-size:22px;font-weight:600;"><span style="color:#ffffff;">Below</span><span style="color:#93c5fd;">MSRP</span></div>
        <div style="display:inline-block;margin-top:16px;background:#fef3c7;border:1px solid #fbbf24;color:#92400e;padding:6px 14px;border-radius:4px;font-size:10px;font-weight:600;text-transform:uppercase;">Priority Alert</div>
        <h1 style="color:#ffffff;font-size:24px;font-weight:600;margin:12px 0 0;">Unrelated Query Detected</h1>
      </td>
    </tr>
    <tr>
      <td style="padding:40px 45px;">
        <p style="font-size:14px;color:#4b5563;line-height:1.7;margin:0 0 28px;">
          A user query has been flagged by the BelowMSRP chatbot system as falling outside the defined service parameters.
          Your review and assessment are requested to determine the appropriate course of action.
        </p>
        <table role="presentation" width="100%" style="border:1px solid #e5e7eb;border-collapse:collapse;background:#f9fafb;">
          <tr><td style="{label_style}">User Email</td><td style="{value_style}">{contact}</td></tr>
          <tr><td style="{label_style}">User Message</td><td style="{value_style}">{user_message}</td></tr>
          <tr><td style="{label_style}">Timestamp</td><td style="{value_style}">{when}</td></tr>
        </table>
        <p style="margin:28px 0 0;padding:20px;background:#fffbeb;border:1px solid #fcd34d;border-left:4px solid #f59e0b;border-radius:6px;font-size:14px;color:#78350f;line-height:1.6;">
          Please evaluate this query and contact the user if necessary. Assessment should include whether this indicates
          a service coverage gap or represents a potential enhancement opportunity for the platform.
        </p>
      </td>
    </tr>
    <tr>
      <td style="background:#f9fafb;padding:32px 45px;text-align:center;border-top:1px solid #e5e7eb;font-size:12px;color:#6b7280;">
        &copy; {timestamp.year} <span style="color:#2563eb;font-weight:600;">BelowMSRP</span> &bull; All Rights Reserved<br>
        Automated Notification System &bull; This is an unmonitored mailbox
      </td>
    </tr>
  </table>
</body>
</html>
"""
