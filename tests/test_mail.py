"""Unit tests for the SMTP mail transport.

The SMTP client classes are replaced with a recording fake; no network access.
"""

import smtplib

import pytest

from leaseform import mail as mail_module
from leaseform.config import MailboxConfig
from leaseform.mail import MailTransport, OutgoingMail, SmtpMailTransport

from tests.conftest import FakeTransport


class FakeSMTP:
    instances = []
    login_error = None
    quit_error = None

    def __init__(self, host, port, **kwargs):
        self.host = host
        self.port = port
        self.kwargs = kwargs
        self.calls = []
        self.closed = False
        self.quit_called = False
        FakeSMTP.instances.append(self)

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))
        if FakeSMTP.login_error is not None:
            raise FakeSMTP.login_error

    def noop(self):
        self.calls.append("noop")
        return 250, b"OK"

    def send_message(self, message):
        self.calls.append(("send", message))

    def quit(self):
        self.quit_called = True
        if FakeSMTP.quit_error is not None:
            raise FakeSMTP.quit_error
        self.closed = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.login_error = None
    FakeSMTP.quit_error = None
    monkeypatch.setattr(mail_module.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(mail_module.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def make_mail():
    return OutgoingMail(
        from_addr="leasing@example.com",
        to_addr="leasing@example.com",
        subject="New Rental Application - Jane Doe",
        text="plain body",
        html="<p>html body</p>",
    )


class TestOutgoingMail:
    """Test MIME message construction."""

    def test_multipart_alternative(self):
        message = make_mail().to_message("<abc@example.com>")
        assert message["From"] == "leasing@example.com"
        assert message["To"] == "leasing@example.com"
        assert message["Message-ID"] == "<abc@example.com>"
        assert message.get_content_type() == "multipart/alternative"
        assert message.get_body(("plain",)).get_content().strip() == "plain body"
        assert message.get_body(("html",)).get_content().strip() == "<p>html body</p>"


class TestSmtpMailTransport:
    """Test the SMTP transport against a fake client."""

    def test_satisfies_protocol(self):
        assert isinstance(SmtpMailTransport(MailboxConfig()), MailTransport)
        assert isinstance(FakeTransport(), MailTransport)

    def test_verify_implicit_tls(self, fake_smtp):
        config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="pw")
        SmtpMailTransport(config).verify_connectivity()
        client = fake_smtp.instances[0]
        assert (client.host, client.port) == ("smtp.gmail.com", 465)
        assert client.calls == [("login", "leasing@example.com", "pw"), "noop"]
        assert "timeout" not in client.kwargs
        assert client.closed

    def test_starttls_on_other_ports(self, fake_smtp):
        config = MailboxConfig(
            mailbox_identity="a@example.com", mailbox_credential="pw",
            smtp_host="smtp.example.com", smtp_port=587, smtp_timeout=10,
        )
        SmtpMailTransport(config).verify_connectivity()
        client = fake_smtp.instances[0]
        assert client.calls[0] == "starttls"
        assert client.kwargs == {"timeout": 10}

    def test_send_returns_message_id(self, fake_smtp):
        config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="pw")
        message_id = SmtpMailTransport(config).send(make_mail())
        kind, message = fake_smtp.instances[0].calls[-1]
        assert kind == "send"
        assert message["Message-ID"] == message_id

    def test_login_failure_closes_connection(self, fake_smtp):
        fake_smtp.login_error = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="wrong")
        with pytest.raises(smtplib.SMTPAuthenticationError):
            SmtpMailTransport(config).verify_connectivity()
        assert fake_smtp.instances[0].closed

    def test_quit_failure_after_send_not_raised(self, fake_smtp):
        fake_smtp.quit_error = smtplib.SMTPResponseException(451, b"closing anyway")
        config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="pw")
        message_id = SmtpMailTransport(config).send(make_mail())
        client = fake_smtp.instances[0]
        assert client.calls[-1][0] == "send"
        assert client.quit_called
        assert client.closed
        assert message_id.startswith("<")

    def test_send_failure_still_disconnects(self, fake_smtp, monkeypatch):
        def refuse(self, message):
            raise smtplib.SMTPDataError(554, b"rejected")

        monkeypatch.setattr(FakeSMTP, "send_message", refuse)
        config = MailboxConfig(mailbox_identity="leasing@example.com", mailbox_credential="pw")
        with pytest.raises(smtplib.SMTPDataError):
            SmtpMailTransport(config).send(make_mail())
        assert fake_smtp.instances[0].quit_called
