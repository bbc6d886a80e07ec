import logging
import smtplib
from email.message import EmailMessage

from .config import Settings
from .exceptions import DispatchError

logger = logging.getLogger("repair_service.notifications")


class SmtpMailTransport:
    """
    Outbound SMTP client. One instance is built at startup and shared by every
    send; each send opens its own SMTP session.
    """

    def __init__(self, host: str, port: int, username: str, password: str,
                 use_tls: bool = True, timeout: float = 10.0, sender_name: str = ""):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender_name = sender_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailTransport":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
            sender_name=settings.APP_NAME,
        )

    @property
    def configured(self) -> bool:
        return bool(self.username)

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f'"{self.sender_name}" <{self.username}>' if self.sender_name else self.username
        msg["To"] = to
        msg.set_content("This message requires an HTML-capable email client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, html: str) -> bool:
        """
        Sends one HTML email. Blocking; call it from a worker thread.

        Returns False when no sender is configured, raises DispatchError when
        the SMTP exchange fails.
        """
        if not self.configured:
            logger.warning(f"EMAIL_USER not set, email to {to} not sent: {subject}")
            return False

        msg = self.build_message(to, subject, html)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(f"SMTP delivery to {to} failed: {e}")
        return True
