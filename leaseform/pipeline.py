"""Submission pipeline for completed rental applications.

``SubmissionPipeline.submit_application`` runs, in order:

1. configuration check (mailbox identity and credential present)
2. required-field validation
3. connectivity probe against the mail service
4. formatting (subject, plain text, HTML)
5. dispatch of one self-addressed email

It stops at the first failure and always returns a SubmissionResult; nothing
is sent unless every earlier stage succeeded.

Usage:
    >>> from leaseform.config import MailboxConfig
    >>> pipeline = SubmissionPipeline(MailboxConfig())
    >>> pipeline.submit_application({}).to_dict()
    {'success': False, 'error': 'Email configuration missing. Please set up mailbox credentials.'}
"""

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from leaseform.config import MailboxConfig
from leaseform.errors import (
    UNEXPECTED_MESSAGE,
    ConnectivityError,
    DispatchError,
    LeaseformError,
    RequiredFieldError,
    SubmissionResult,
)
from leaseform.formatting import Clock, FormattedApplication, format_application
from leaseform.mail import MailTransport, OutgoingMail, SmtpMailTransport
from leaseform.types import ErrorType
from leaseform.validation import ValidationEngine
from leaseform.variants import SUBMISSION_REQUIRED_FIELDS

logger = logging.getLogger(__name__)

TransportFactory = Callable[[MailboxConfig], MailTransport]


def _reason(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SubmissionPipeline:
    """Validate, format and email one application record.

    Attributes:
        config: Injected mailbox configuration
        required_fields: Fields checked before anything is sent, in order

    Args:
        config: Mailbox configuration
        transport: Mail transport; built from ``transport_factory`` when omitted
        transport_factory: Builds a transport from a complete config
        required_fields: Override of the submission required-field list
        clock: Render timestamp source for formatting
    """

    def __init__(
        self,
        config: MailboxConfig,
        transport: Optional[MailTransport] = None,
        transport_factory: TransportFactory = SmtpMailTransport,
        required_fields: Sequence[str] = SUBMISSION_REQUIRED_FIELDS,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.required_fields = tuple(required_fields)
        self._transport = transport
        self._transport_factory = transport_factory
        self._validation_engine = ValidationEngine(self.required_fields)
        self._clock = clock

    @property
    def transport(self) -> MailTransport:
        if self._transport is None:
            self._transport = self._transport_factory(self.config)
        return self._transport

    def validate_required_fields(self, record: Mapping[str, Any]) -> Optional[str]:
        """Return the first required field that is unset, or None."""
        return self._validation_engine.first_missing(record)

    def format_application(self, record: Mapping[str, Any]) -> FormattedApplication:
        return format_application(record, clock=self._clock)

    def verify_connectivity(self) -> None:
        """Probe the mail service.

        Raises:
            ConnectivityError: If the probe fails for any reason
        """
        try:
            self.transport.verify_connectivity()
        except Exception as exc:
            logger.error("Mail service connectivity check failed: %s", exc)
            raise ConnectivityError(_reason(exc)) from exc

    def dispatch(self, subject: str, plain_text: str, rich_text: str) -> str:
        """Send the application to the configured mailbox.

        Returns:
            The message id reported by the transport

        Raises:
            DispatchError: If the transport fails to send
        """
        mailbox = self.config.mailbox_identity or ""
        mail = OutgoingMail(
            from_addr=mailbox,
            to_addr=mailbox,
            subject=subject,
            text=plain_text,
            html=rich_text,
        )
        try:
            message_id = self.transport.send(mail)
        except Exception as exc:
            logger.error("Sending application email failed: %s", exc)
            raise DispatchError(_reason(exc)) from exc
        logger.info("Application email sent: %s", message_id)
        return message_id

    def _run(self, record: Mapping[str, Any]) -> SubmissionResult:
        config_error = self.config.configuration_error()
        if config_error is not None:
            logger.error(
                "Mailbox configuration incomplete, missing: %s",
                ", ".join(config_error.missing_keys),
            )
            raise config_error

        missing = self.validate_required_fields(record)
        if missing is not None:
            logger.warning("Application rejected, missing required field: %s", missing)
            raise RequiredFieldError(missing)

        self.verify_connectivity()

        formatted = self.format_application(record)
        message_id = self.dispatch(formatted.subject, formatted.plain_text, formatted.rich_text)
        return SubmissionResult.succeeded(message_id)

    def submit_application(self, record: Mapping[str, Any]) -> SubmissionResult:
        """Run the full pipeline; never raises.

        Returns:
            ``SubmissionResult(success=True)`` once the email is handed off,
            otherwise a failure carrying a user-facing reason
        """
        logger.info("Starting application submission (%d fields)", len(record))
        try:
            result = self._run(record)
        except LeaseformError as exc:
            return SubmissionResult.from_error(exc)
        except Exception:
            logger.exception("Unexpected error while submitting application")
            return SubmissionResult.failed(ErrorType.UNEXPECTED, UNEXPECTED_MESSAGE)
        logger.info("Application submission completed")
        return result


def submit_application(
    record: Mapping[str, Any],
    config: Optional[MailboxConfig] = None,
    transport: Optional[MailTransport] = None,
) -> SubmissionResult:
    """Submit one application using ``config`` or, if omitted, the environment."""
    if config is None:
        try:
            config = MailboxConfig.from_env()
        except ValueError:
            logger.exception("Mailbox configuration could not be parsed")
            return SubmissionResult.failed(ErrorType.CONFIGURATION, "Email configuration is invalid.")
    return SubmissionPipeline(config, transport=transport).submit_application(record)


__all__ = [
    "SubmissionPipeline",
    "TransportFactory",
    "submit_application",
]
