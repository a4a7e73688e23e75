from __future__ import annotations

import pytest

from events_reporter.config import EmailSettings
from events_reporter.mailer import MailConfigError, build_mailer


def test_selects_smtp_by_default():
    mailer = build_mailer(EmailSettings(smtp_server="smtp.example.com", port=587))
    assert mailer.provider == "smtp"


def test_smtp_selection_does_not_require_server_up_front():
    assert build_mailer(EmailSettings()).provider == "smtp"


def test_selects_sendgrid_when_configured():
    mailer = build_mailer(EmailSettings(provider="sendgrid", api_key="sendgrid-key"))
    assert mailer.provider == "sendgrid"


def test_selects_brevo_when_configured():
    mailer = build_mailer(EmailSettings(provider="brevo", api_key="brevo-key"))
    assert mailer.provider == "brevo"


def test_raises_when_api_provider_has_no_key():
    with pytest.raises(MailConfigError):
        build_mailer(EmailSettings(provider="brevo", api_key=None))
