"""Mailbox configuration.

The submission pipeline never reads the environment itself; it receives a
MailboxConfig. ``MailboxConfig.from_env`` builds one from an optional ``.env``
file and the process environment, the process environment taking precedence.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import dotenv_values

from leaseform.errors import ConfigurationError

logger = logging.getLogger(__name__)

MAILBOX_IDENTITY_KEY = "GMAIL_USER"
MAILBOX_CREDENTIAL_KEY = "GMAIL_APP_PASSWORD"
SMTP_HOST_KEY = "SMTP_HOST"
SMTP_PORT_KEY = "SMTP_PORT"
SMTP_TIMEOUT_KEY = "SMTP_TIMEOUT"

DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 465


@dataclass(frozen=True)
class MailboxConfig:
    """Settings for the self-addressed notification mailbox.

    Attributes:
        mailbox_identity: Address the application is sent from and to
        mailbox_credential: Application-specific password for that mailbox
        smtp_host: SMTP server host
        smtp_port: SMTP server port (465 uses implicit TLS, others STARTTLS)
        smtp_timeout: Socket timeout in seconds; None waits indefinitely

    Examples:
        >>> config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="")
        >>> config.missing_keys()
        ['GMAIL_APP_PASSWORD']
    """
    mailbox_identity: Optional[str] = None
    mailbox_credential: Optional[str] = field(default=None, repr=False)
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_timeout: Optional[float] = None

    def missing_keys(self) -> List[str]:
        missing = []
        if not self.mailbox_identity:
            missing.append(MAILBOX_IDENTITY_KEY)
        if not self.mailbox_credential:
            missing.append(MAILBOX_CREDENTIAL_KEY)
        return missing

    def configuration_error(self) -> Optional[ConfigurationError]:
        """Return a ConfigurationError naming the absent secrets, or None."""
        missing = self.missing_keys()
        if missing:
            return ConfigurationError(missing)
        return None

    @property
    def is_complete(self) -> bool:
        return not self.missing_keys()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "MailboxConfig":
        """Build a config from environment-style string values.

        Raises:
            ValueError: If SMTP_PORT or SMTP_TIMEOUT is not numeric
        """
        port = values.get(SMTP_PORT_KEY)
        timeout = values.get(SMTP_TIMEOUT_KEY)
        return cls(
            mailbox_identity=(values.get(MAILBOX_IDENTITY_KEY) or "").strip() or None,
            mailbox_credential=values.get(MAILBOX_CREDENTIAL_KEY) or None,
            smtp_host=values.get(SMTP_HOST_KEY) or DEFAULT_SMTP_HOST,
            smtp_port=int(port) if port else DEFAULT_SMTP_PORT,
            smtp_timeout=float(timeout) if timeout else None,
        )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[str] = None,
    ) -> "MailboxConfig":
        """Load settings from ``env_file`` (if given) overlaid with ``environ``.

        Args:
            environ: Environment mapping; defaults to ``os.environ``
            env_file: Optional path to a dotenv file
        """
        values = {}
        if env_file:
            values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        values.update(os.environ if environ is None else environ)
        config = cls.from_mapping(values)
        logger.debug(
            "Mailbox configuration loaded: identity set=%s, credential set=%s, host=%s:%s",
            bool(config.mailbox_identity),
            bool(config.mailbox_credential),
            config.smtp_host,
            config.smtp_port,
        )
        return config


__all__ = [
    "MailboxConfig",
    "MAILBOX_IDENTITY_KEY",
    "MAILBOX_CREDENTIAL_KEY",
    "DEFAULT_SMTP_HOST",
    "DEFAULT_SMTP_PORT",
]
