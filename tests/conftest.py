"""Shared fakes and fixtures for the leaseform tests."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from leaseform.config import MailboxConfig
from leaseform.fields import new_record
from leaseform.mail import OutgoingMail
from leaseform.pipeline import SubmissionPipeline

MAILBOX = "leasing@example.com"
FIXED_NOW = datetime(2024, 5, 17, 14, 30, 5)


class FakeTransport:
    """Records calls instead of talking to a mail server."""

    def __init__(self, verify_error: Optional[Exception] = None, send_error: Optional[Exception] = None):
        self.verify_error = verify_error
        self.send_error = send_error
        self.verify_calls = 0
        self.sent: List[OutgoingMail] = []

    def verify_connectivity(self) -> None:
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error

    def send(self, mail: OutgoingMail) -> str:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(mail)
        return f"<msg-{len(self.sent)}@example.com>"


def fixed_clock() -> datetime:
    return FIXED_NOW


def jane_doe(**overrides: Any) -> Dict[str, Any]:
    """Minimal record that passes the submission check."""
    record = new_record()
    record.update(
        firstName="Jane",
        lastName="Doe",
        email="jane@x.com",
        phone="555-1111",
        employmentStatus="full-time",
        monthlyIncome="4000",
        agreement=True,
    )
    record.update(overrides)
    return record


def complete_personal() -> Dict[str, Any]:
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@x.com",
        "phone": "555-1111",
        "dateOfBirth": "1990-04-12",
        "ssn": "123-45-6789",
        "currentAddress": "12 Elm Street",
        "city": "Springfield",
        "state": "IL",
        "zipCode": "62701",
    }


def complete_disclosures() -> Dict[str, Any]:
    return {
        "moveInDate": "2024-07-01",
        "fundsAtHand": "6000",
        "intendedLeaseTime": "12 months",
        "declaredBankruptcy": "no",
        "paymentMethod": "bank transfer",
    }


@pytest.fixture
def config() -> MailboxConfig:
    return MailboxConfig(mailbox_identity=MAILBOX, mailbox_credential="app-password")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def pipeline(config, transport) -> SubmissionPipeline:
    return SubmissionPipeline(config, transport=transport, clock=fixed_clock)
