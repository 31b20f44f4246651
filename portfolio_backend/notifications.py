"""
Email notifications for new contact submissions.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

import requests

from portfolio_backend.errors import NotificationError

if TYPE_CHECKING:
    from portfolio_backend.contacts import ContactSubmission

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
REQUEST_TIMEOUT = 15  # seconds


class EmailNotifier(Protocol):
    """Sends the operator an email about a contact submission."""

    def send_contact_notification(self, submission: "ContactSubmission") -> None:
        ...


def format_received_at(submitted_at: str, timezone_name: str) -> str:
    moment = datetime.fromisoformat(submitted_at).astimezone(ZoneInfo(timezone_name))
    return moment.strftime("%A, %B %d, %Y, %I:%M %p")


def render_contact_email(
    submission: "ContactSubmission",
    *,
    timezone_name: str = "Asia/Karachi",
    site_name: str = "shehroz.dev",
) -> str:
    """Build the HTML body of the operator notification.

    Every user-supplied value is escaped before it is placed in the markup.
    """
    name = html.escape(submission.name)
    email = html.escape(submission.email, quote=True)
    message = html.escape(submission.message)
    received = html.escape(
        format_received_at(submission.submitted_at, timezone_name)
    )
    zone = html.escape(timezone_name)
    reply_subject = html.escape(f"Re: Your message on {site_name}", quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
</head>
<body style="margin:0;padding:0;background:#F7F8FA;font-family:'Segoe UI',Helvetica,Arial,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 20px;">
    <tr>
      <td>
        <table width="600" align="center" cellpadding="0" cellspacing="0"
          style="background:#ffffff;border-radius:16px;max-width:600px;">
          <tr>
            <td style="background:#2563EB;padding:32px 40px;">
              <h1 style="margin:0;color:#ffffff;font-size:22px;">New Portfolio Message</h1>
              <p style="margin:8px 0 0;color:#DBEAFE;font-size:14px;">
                Someone reached out via your portfolio contact form
              </p>
            </td>
          </tr>
          <tr>
            <td style="padding:36px 40px;">
              <p style="margin:0 0 8px;font-size:15px;color:#1E293B;">
                <strong>Name:</strong>&nbsp; {name}
              </p>
              <p style="margin:0 0 24px;font-size:15px;color:#1E293B;">
                <strong>Email:</strong>&nbsp;
                <a href="mailto:{email}" style="color:#3B82F6;">{email}</a>
              </p>
              <p style="margin:0 0 8px;font-size:13px;font-weight:600;color:#6B7280;">Message</p>
              <div style="background:#F9FAFB;border-left:4px solid #3B82F6;padding:18px 20px;margin-bottom:28px;">
                <p style="margin:0;font-size:15px;line-height:1.7;color:#374151;white-space:pre-wrap;">{message}</p>
              </div>
              <a href="mailto:{email}?subject={reply_subject}"
                style="display:inline-block;background:#3B82F6;color:#ffffff;text-decoration:none;padding:12px 28px;border-radius:8px;">
                Reply to {name}
              </a>
            </td>
          </tr>
          <tr>
            <td style="padding:20px 40px;border-top:1px solid #F1F5F9;">
              <p style="margin:0;font-size:12px;color:#9CA3AF;text-align:center;">
                Received on {received} ({zone}) &middot; Portfolio Contact Form
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


@dataclass
class InMemoryEmailNotifier:
    """Test double that records notifications instead of sending them."""

    sent: list = field(default_factory=list)

    def send_contact_notification(self, submission: "ContactSubmission") -> None:
        logger.info(
            "RESEND_API_KEY not set, skipping email for contact %s", submission.id
        )
        self.sent.append(submission)


@dataclass
class ResendEmailNotifier:
    """Delivers notifications through the Resend transactional email API."""

    api_key: str
    sender: str
    recipients: list[str]
    timezone_name: str = "Asia/Karachi"
    site_name: str = "shehroz.dev"

    def build_payload(self, submission: "ContactSubmission") -> dict:
        return {
            "from": self.sender,
            "to": list(self.recipients),
            "reply_to": submission.email,
            "subject": f"New portfolio contact from {submission.name}",
            "html": render_contact_email(
                submission,
                timezone_name=self.timezone_name,
                site_name=self.site_name,
            ),
        }

    def send_contact_notification(self, submission: "ContactSubmission") -> None:
        try:
            response = requests.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self.build_payload(submission),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise NotificationError(f"Resend request failed: {exc}") from exc
        if not response.ok:
            raise NotificationError(
                f"Resend delivery failed ({response.status_code}): {response.text}"
            )
        logger.info("Sent contact notification for submission %s", submission.id)
