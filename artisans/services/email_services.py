import logging
import smtplib
import time
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional, Protocol

from ..core.config import Settings, get_settings
from ..core.errors import MailDeliveryError
from ..core.template_engine import render_template
from ..models.invitations import TeamInvitation

logger = logging.getLogger(__name__)


@dataclass
class MailResult:
    accepted: List[str]
    rejected: List[str] = field(default_factory=list)
    response: str = ""
    message_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.accepted) and not self.rejected


class MailTransport(Protocol):

    def send(self, message: MIMEMultipart) -> MailResult: ...


class SMTPTransport:

    def __init__(self, server: str, port: int, username: str, password: str):
        self.server = server
        self.port = port
        self.username = username
        self.password = password

    def send(self, message: MIMEMultipart) -> MailResult:
        with smtplib.SMTP(self.server, self.port) as server:
            server.starttls()
            server.login(self.username, self.password)
            refused = server.send_message(message)
        recipients = [message["To"]]
        return MailResult(
            accepted=[r for r in recipients if r not in refused],
            rejected=list(refused),
            response="250 OK",
            message_id=message["Message-ID"],
        )


class MockTransport:
    """Logs the message instead of sending it, and reports success."""

    def send(self, message: MIMEMultipart) -> MailResult:
        logger.info(
            "MOCK EMAIL SENT to=%s subject=%r", message["To"], message["Subject"]
        )
        return MailResult(
            accepted=[message["To"]],
            response="Mock email sent successfully",
            message_id=f"mock-id-{int(time.time() * 1000)}",
        )


def build_transport(settings: Settings) -> MailTransport:
    if not settings.mail_configured:
        logger.warning("Email credentials not configured, falling back to mock transport")
        return MockTransport()
    return SMTPTransport(
        settings.MAIL_SERVER,
        settings.MAIL_PORT,
        settings.MAIL_USERNAME,
        settings.MAIL_PASSWORD,
    )


class EmailService:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[MailTransport] = None):
        self.settings = settings or get_settings()
        self.from_email = self.settings.MAIL_USERNAME or self.settings.MAIL_FROM
        self.transport = transport or build_transport(self.settings)

    def send_email(self, to: str, subject: str, text: str = "", html: str = "") -> MailResult:
        message = MIMEMultipart("alternative")
        message["From"] = self.from_email
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        try:
            return self.transport.send(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to, e)
            raise MailDeliveryError(f"Could not deliver email to {to}") from e

    def invite_link(self, token: str) -> str:
        return f"{self.settings.APP_URL}/join/{token}"

    def reset_link(self, token: str) -> str:
        return f"{self.settings.APP_URL}/reset-password/{token}"

    def send_team_invitation_email(self, invitation: TeamInvitation, project_name: str) -> MailResult:
        context = {
            "project_name": project_name,
            "role_label": invitation.role.label,
            "invite_link": self.invite_link(invitation.invite_token),
            "expire_days": self.settings.INVITATION_EXPIRE_DAYS,
        }
        return self.send_email(
            to=invitation.invite_email,
            subject=f"You've been invited to join the {project_name} project on Artisans Platform",
            text=render_template("email/team_invitation.txt", **context),
            html=render_template("email/team_invitation.html", **context),
        )

    def send_password_reset_email(self, email: str, token: str) -> MailResult:
        context = {
            "reset_link": self.reset_link(token),
            "expire_hours": self.settings.RESET_TOKEN_EXPIRE_HOURS,
        }
        return self.send_email(
            to=email,
            subject="Reset Your Artisans Platform Password",
            text=render_template("email/password_reset.txt", **context),
            html=render_template("email/password_reset.html", **context),
        )


def deliver_quietly(send, *args, **kwargs) -> Optional[MailResult]:
    """Run a send from a background task; delivery failures are logged, never raised."""
    try:
        return send(*args, **kwargs)
    except MailDeliveryError as e:
        logger.warning("Mail delivery failed: %s", e.message)
        return None


# Global service instance
email_service = EmailService()


def get_email_service() -> EmailService:
    return email_service
