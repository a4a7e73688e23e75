from __future__ import annotations

from datetime import timedelta

import pytest

from events_reporter.config import Config, ConfigError, parse_duration

CONFIG_YAML = """
email_settings:
  smtp_server: smtp.example.com
  port: 587
  username: reporter
  password: from-file
reports:
  pods:
    description: pod restarts
    kind: Pod
    reasons:
      - Started
      - BackOff
    interval: 1h30m
    email_recipients:
      - ops@example.com
  anything:
    reasons:
      - FailedScheduling
"""


def test_from_file_parses_reports(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text(CONFIG_YAML, encoding="utf-8")

    config = Config.from_file(p, env={})

    assert config.email_settings.smtp_server == "smtp.example.com"
    assert config.email_settings.port == 587
    assert config.email_settings.password == "from-file"
    assert config.email_settings.from_email == "event-reporter@test.com"
    pods = config.reports["pods"]
    assert pods.kind == "Pod"
    assert pods.reasons == ("Started", "BackOff")
    assert pods.interval == timedelta(hours=1, minutes=30)
    assert pods.email_recipients == ("ops@example.com",)
    anything = config.reports["anything"]
    assert anything.kind == ""
    assert anything.interval == timedelta(hours=24)
    assert anything.namespace == ""


def test_env_overrides_password(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text(CONFIG_YAML, encoding="utf-8")
    config = Config.from_file(p, env={"SMTP_PASSWORD": "from-env"})
    assert config.email_settings.password == "from-env"


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="could not read"):
        Config.from_file(tmp_path / "missing.yaml")


def test_invalid_yaml_raises(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text("reports: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid configuration"):
        Config.from_file(p)


def test_bad_interval_names_report():
    with pytest.raises(ConfigError, match="pods"):
        Config.from_dict({"reports": {"pods": {"interval": "soon"}}}, env={})


def test_reasons_must_be_list_of_strings():
    with pytest.raises(ConfigError):
        Config.from_dict({"reports": {"pods": {"reasons": "Started"}}}, env={})


def test_unknown_provider_rejected():
    with pytest.raises(ConfigError):
        Config.from_dict({"email_settings": {"provider": "pigeon"}}, env={})


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("24h", timedelta(hours=24)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("300ms", timedelta(milliseconds=300)),
        ("2m3s", timedelta(minutes=2, seconds=3)),
        ("0", timedelta(0)),
    ],
)
def test_parse_duration(text: str, expected: timedelta):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "h", "10", "5d", "1h 30m"])
def test_parse_duration_rejects_invalid(text: str):
    with pytest.raises(ConfigError):
        parse_duration(text)


def test_zero_interval_rejected():
    with pytest.raises(ConfigError, match="positive"):
        Config.from_dict({"reports": {"pods": {"interval": "0s"}}}, env={})
