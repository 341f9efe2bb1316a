"""ApplicationRuntime: wiring for the rental application engine.

The runtime holds the pieces every wizard shares (mailbox configuration, the
mail transport and the form variant) and hands out independent FormWizard
instances. Each wizard owns its own record and state; the runtime keeps no
per-applicant data.

Usage:
    >>> from leaseform.runtime import ApplicationRuntime
    >>> from leaseform.config import MailboxConfig
    >>> runtime = ApplicationRuntime(config=MailboxConfig(), variant="four_step")
    >>> wizard = runtime.create_wizard()
    >>> wizard.step_count
    4
"""

import logging
from typing import Any, Mapping, Optional, Union

from leaseform.config import MailboxConfig
from leaseform.errors import SubmissionResult
from leaseform.events import EventEmitter
from leaseform.formatting import Clock
from leaseform.mail import MailTransport
from leaseform.pipeline import SubmissionPipeline
from leaseform.variants import DEFAULT_VARIANT, FormVariant, get_variant
from leaseform.wizard import FormWizard

logger = logging.getLogger(__name__)


class ApplicationRuntime:
    """Factory for wizards sharing one configuration and transport.

    Attributes:
        config: Mailbox configuration injected into the pipeline
        variant: Form configuration used by created wizards
        pipeline: The shared submission pipeline

    Examples:
        >>> runtime = ApplicationRuntime(config=MailboxConfig())
        >>> runtime.variant.name
        'five_step'
    """

    def __init__(
        self,
        config: MailboxConfig,
        variant: Union[str, FormVariant] = DEFAULT_VARIANT,
        transport: Optional[MailTransport] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.variant = get_variant(variant) if isinstance(variant, str) else variant
        self.pipeline = SubmissionPipeline(config, transport=transport, clock=clock)
        if not config.is_complete:
            logger.warning(
                "Mailbox configuration incomplete (missing %s); submissions will fail",
                ", ".join(config.missing_keys()),
            )

    @classmethod
    def from_env(
        cls,
        variant: Union[str, FormVariant] = DEFAULT_VARIANT,
        env_file: Optional[str] = None,
        transport: Optional[MailTransport] = None,
    ) -> "ApplicationRuntime":
        """Build a runtime from the process environment and an optional .env file."""
        return cls(MailboxConfig.from_env(env_file=env_file), variant=variant, transport=transport)

    def create_wizard(self, emitter: Optional[EventEmitter] = None) -> FormWizard:
        """Start a new, empty application."""
        wizard = FormWizard(variant=self.variant, pipeline=self.pipeline, emitter=emitter)
        logger.debug("Created wizard %s (%s)", wizard.wizard_id, self.variant.name)
        return wizard

    def submit_application(self, record: Mapping[str, Any]) -> SubmissionResult:
        """Submit a complete record directly, bypassing the wizard."""
        return self.pipeline.submit_application(record)


__all__ = [
    "ApplicationRuntime",
]
