"""
Outbound email for the platform.

Notifiers share one contract: ``send(message)`` returns on success and raises
``NotificationError`` when the message could not be handed to the provider.
``SendGridNotifier`` talks to SendGrid; ``LogNotifier`` only logs and is used
when no SendGrid key is configured.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from flask import Flask, current_app
from markupsafe import escape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Content, Email, Mail, ReplyTo, To

from assetshield.errors import NotificationError
from assetshield.infra.log import get_logger

logger = get_logger("assetshield.notifications")


@dataclass
class EmailMessage:
    to_email: str
    subject: str
    html_content: str
    text_content: Optional[str] = None
    reply_to: Optional[str] = None
    category: str = "transactional"


class LogNotifier:
    """Records messages in the log instead of sending them."""

    def send(self, message: EmailMessage) -> None:
        logger.warning(
            "Email delivery not configured; message logged only",
            to_email=message.to_email,
            subject=message.subject,
            category=message.category,
        )


class SendGridNotifier:
    """Sends email through SendGrid with a small retry loop for 5xx responses."""

    def __init__(self, api_key: str, from_email: str, from_name: str, retries: int = 3,
                 client: Optional[SendGridAPIClient] = None):
        self.from_email = from_email
        self.from_name = from_name
        self.retries = retries
        self.client = client or SendGridAPIClient(api_key)

    def _build(self, message: EmailMessage) -> Mail:
        mail = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(message.to_email),
            subject=message.subject,
            html_content=Content("text/html", message.html_content),
        )
        if message.text_content:
            mail.add_content(Content("text/plain", message.text_content))
        if message.reply_to:
            mail.reply_to = ReplyTo(message.reply_to)
        return mail

    def send(self, message: EmailMessage) -> None:
        mail = self._build(message)
        last_error = None

        for attempt in range(self.retries):
            try:
                response = self.client.send(mail)
            except Exception as e:
                last_error = str(e)
                logger.warning(
                    f"Error sending email (attempt {attempt + 1}/{self.retries}): {e}",
                    to_email=message.to_email,
                )
                continue

            if response.status_code in (200, 201, 202):
                logger.info("Email sent", to_email=message.to_email, subject=message.subject,
                            category=message.category)
                return
            if response.status_code >= 500:
                last_error = f"SendGrid server error {response.status_code}"
                logger.warning(f"{last_error} (attempt {attempt + 1}/{self.retries})")
                continue

            # client errors are not retried
            raise NotificationError(f"SendGrid rejected message: {response.status_code}")

        raise NotificationError(f"Email delivery failed: {last_error}")


def init_notifier(app: Flask) -> None:
    """Install the configured notifier. A ``NOTIFIER`` config entry wins (tests, scripts)."""
    if app.config.get("NOTIFIER") is not None:
        app.extensions["notifier"] = app.config["NOTIFIER"]
        return
    api_key = app.config.get("SENDGRID_API_KEY")
    if api_key:
        app.extensions["notifier"] = SendGridNotifier(
            api_key=api_key,
            from_email=app.config["SENDGRID_FROM_EMAIL"],
            from_name=app.config["SENDGRID_FROM_NAME"],
        )
    else:
        logger.warning("SENDGRID_API_KEY not set - emails will be logged, not sent")
        app.extensions["notifier"] = LogNotifier()


def get_notifier():
    return current_app.extensions["notifier"]


def build_welcome_email(
    *,
    to_email: str,
    lawyer_name: str,
    firm_name: str,
    tier_name: str,
    dashboard_url: str,
    admin_password: str,
    api_key: str,
    trial_ends_at: datetime,
    monthly_fee: int,
    features: List[str],
    support_email: str,
) -> EmailMessage:
    """Welcome email sent at the end of provisioning."""
    trial_end = trial_ends_at.strftime("%B %d, %Y")
    feature_items = "".join(f"<li>{escape(f)}</li>" for f in features)

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background: #1e40af; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
            <h1>Welcome to AssetShield, {escape(lawyer_name)}!</h1>
        </div>
        <div style="background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px;">
            <p>Your white-label platform for <strong>{escape(firm_name)}</strong> is ready.</p>

            <div style="background: white; padding: 20px; border-left: 4px solid #1e40af; margin: 20px 0;">
                <strong>Your login details</strong><br>
                Dashboard: <a href="{escape(dashboard_url)}">{escape(dashboard_url)}</a><br>
                Email: <strong>{escape(to_email)}</strong><br>
                Temporary password: <strong>{escape(admin_password)}</strong><br>
                API key: <code>{escape(api_key)}</code>
            </div>

            <p>Your <strong>{escape(tier_name)}</strong> plan includes:</p>
            <ul>{feature_items}</ul>

            <p>Your free trial runs until <strong>{trial_end}</strong>. After that your plan
            continues at ${monthly_fee:,}/month.</p>

            <p>Please change your password after your first login.</p>
            <p>Questions? Reach us at <a href="mailto:{escape(support_email)}">{escape(support_email)}</a>.</p>
        </div>
    </body>
    </html>
    """

    text_content = (
        f"Welcome to AssetShield, {lawyer_name}!\n\n"
        f"Your platform for {firm_name} is ready.\n\n"
        f"Dashboard: {dashboard_url}\n"
        f"Email: {to_email}\n"
        f"Temporary password: {admin_password}\n"
        f"API key: {api_key}\n\n"
        f"Plan: {tier_name} (${monthly_fee:,}/month)\n"
        f"Trial ends: {trial_end}\n"
    )

    return EmailMessage(
        to_email=to_email,
        subject=f"Welcome to AssetShield - {firm_name} is ready",
        html_content=html_content,
        text_content=text_content,
        reply_to=support_email,
        category="welcome",
    )
