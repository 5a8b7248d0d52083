import smtplib

import pytest

import config
from utils import mailer


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        pass

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, message):
        FakeSMTP.sent.append(message)


@pytest.fixture
def smtp_enabled(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(config, "MAIL_ENABLED", True)
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(config, "MAIL_FROM", "noreply@litplatform.app")
    monkeypatch.setattr(config, "PUBLIC_APP_BASE_URL", "https://lit.example.com/")
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)


def test_skipped_when_not_configured(monkeypatch):
    monkeypatch.setattr(config, "MAIL_ENABLED", False)
    assert mailer.send_password_reset_email("a@x.com", "Ann", "tok") is False


def test_reset_url():
    url = mailer.build_reset_url("abc123")
    assert url.endswith("/reset-password?token=abc123")


def test_sends_reset_link(smtp_enabled):
    assert mailer.send_password_reset_email("a@x.com", "Ann", "abc123") is True

    (message,) = FakeSMTP.sent
    assert message["To"] == "a@x.com"
    assert "https://lit.example.com/reset-password?token=abc123" in message.get_body(
        ("plain",)
    ).get_content()


def test_delivery_failure_is_reported_not_raised(smtp_enabled, monkeypatch):
    def broken(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "unavailable")

    monkeypatch.setattr(mailer.smtplib, "SMTP", broken)
    assert mailer.send_password_reset_email("a@x.com", "Ann", "abc123") is False


def test_name_is_escaped_in_html_body(smtp_enabled):
    name = '<a href="https://evil.example">click</a>'
    mailer.send_password_reset_email("a@x.com", name, "abc123")

    (message,) = FakeSMTP.sent
    html_body = message.get_body(("html",)).get_content()
    assert "evil.example" in html_body
    assert "<a href=\"https://evil.example\">" not in html_body
    assert "&lt;a href=" in html_body
