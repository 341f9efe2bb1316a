"""leaseform: rental application wizard and submission pipeline.

leaseform provides:
- A configuration-driven multi-step form wizard with per-step required fields
- A submission pipeline that validates, formats and emails an application
- Structured, user-facing results and notifications instead of raw exceptions
- An event stream covering every edit, navigation attempt and submission

Basic usage:
    >>> from leaseform import ApplicationRuntime, MailboxConfig
    >>> runtime = ApplicationRuntime(config=MailboxConfig(), variant="single_page")
    >>> wizard = runtime.create_wizard()
    >>> wizard.advance()
    False
    >>> wizard.notifications[0].title
    'Please complete all required fields'
"""

__version__ = "0.1.0"
__author__ = "leaseform maintainers"

# Version info
VERSION = (0, 1, 0)

# Core exports
from leaseform.config import MailboxConfig
from leaseform.errors import SubmissionResult
from leaseform.pipeline import SubmissionPipeline, submit_application
from leaseform.runtime import ApplicationRuntime
from leaseform.wizard import FormWizard

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "ApplicationRuntime",
    "FormWizard",
    "MailboxConfig",
    "SubmissionPipeline",
    "SubmissionResult",
    "submit_application",
]
