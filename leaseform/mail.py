"""Mail transport seam for the submission pipeline.

The pipeline only needs two operations from a mail service: a connectivity
probe and a send. MailTransport names that seam; SmtpMailTransport implements
it over ``smtplib``. Both operations raise on failure, the pipeline decides
how failures are reported.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from typing_extensions import Protocol, runtime_checkable

from leaseform.config import MailboxConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingMail:
    """A single email ready to hand to a transport."""
    from_addr: str
    to_addr: str
    subject: str
    text: str
    html: str

    def to_message(self, message_id: Optional[str] = None) -> EmailMessage:
        """Build a multipart/alternative message with text and HTML parts."""
        message = EmailMessage()
        message["From"] = self.from_addr
        message["To"] = self.to_addr
        message["Subject"] = self.subject
        message["Message-ID"] = message_id or make_msgid()
        message.set_content(self.text)
        message.add_alternative(self.html, subtype="html")
        return message


@runtime_checkable
class MailTransport(Protocol):
    """Send-capable mail service."""

    def verify_connectivity(self) -> None:
        """Raise if the service cannot be reached or rejects the credentials."""
        ...

    def send(self, mail: OutgoingMail) -> str:
        """Deliver ``mail`` and return its message id; raise on failure."""
        ...


class SmtpMailTransport:
    """MailTransport over SMTP with login.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS. A new
    connection is opened for every operation.
    """

    def __init__(self, config: MailboxConfig):
        self.config = config

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        timeout = self.config.smtp_timeout
        kwargs = {} if timeout is None else {"timeout": timeout}
        if self.config.smtp_port == 465:
            client: smtplib.SMTP = smtplib.SMTP_SSL(
                self.config.smtp_host, self.config.smtp_port, context=context, **kwargs
            )
        else:
            client = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, **kwargs)
        try:
            if self.config.smtp_port != 465:
                client.starttls(context=context)
            client.login(self.config.mailbox_identity or "", self.config.mailbox_credential or "")
        except Exception:
            client.close()
            raise
        return client

    @staticmethod
    def _disconnect(client: smtplib.SMTP) -> None:
        # Once the session's work is done, a rejected QUIT must not turn it into a failure.
        try:
            client.quit()
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP QUIT failed, closing connection: %s", exc)
            client.close()

    def verify_connectivity(self) -> None:
        logger.info("Verifying SMTP connection to %s:%s", self.config.smtp_host, self.config.smtp_port)
        client = self._connect()
        try:
            status, _ = client.noop()
            if status != 250:
                raise smtplib.SMTPResponseException(status, b"NOOP rejected")
        finally:
            self._disconnect(client)

    def send(self, mail: OutgoingMail) -> str:
        message_id = make_msgid()
        message = mail.to_message(message_id)
        client = self._connect()
        try:
            client.send_message(message)
        finally:
            self._disconnect(client)
        return message_id


__all__ = [
    "OutgoingMail",
    "MailTransport",
    "SmtpMailTransport",
]
