from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

# --------------------------------
# Defaults

# Polling interval used when a report does not set one
DEFAULT_INTERVAL = "24h"

# Sender address used when email_settings.from_email is absent
DEFAULT_FROM_EMAIL = "event-reporter@test.com"

DEFAULT_MAIL_PROVIDER = "smtp"
MAIL_PROVIDERS = ("smtp", "sendgrid", "brevo")

# Environment variables that override secrets from the config file
ENV_SMTP_PASSWORD = "SMTP_PASSWORD"
ENV_MAIL_API_KEY = "MAIL_API_KEY"
# --------------------------------

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART_RE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class ConfigError(ValueError):
    """Raised when the configuration file cannot be loaded."""


def parse_duration(text: str) -> timedelta:
    """Parse a Go style duration such as "24h", "1h30m" or "1.5s"."""
    value = text.strip()
    if not value:
        raise ConfigError("empty duration")
    sign = 1
    if value[0] in "+-":
        sign = -1 if value[0] == "-" else 1
        value = value[1:]
    if value == "0":
        return timedelta(0)

    seconds = 0.0
    pos = 0
    while pos < len(value):
        match = _DURATION_PART_RE.match(value, pos)
        if not match:
            raise ConfigError(f"invalid duration {text!r}")
        number, unit = match.groups()
        seconds += float(number) * _DURATION_UNITS[unit]
        pos = match.end()
    if pos == 0:
        raise ConfigError(f"invalid duration {text!r}")
    return timedelta(seconds=sign * seconds)


@dataclass(frozen=True)
class EmailSettings:
    smtp_server: str = ""
    port: int = 0
    username: str = ""
    password: str = ""
    from_email: str = DEFAULT_FROM_EMAIL
    provider: str = DEFAULT_MAIL_PROVIDER
    api_key: Optional[str] = None


@dataclass(frozen=True)
class ReportSpec:
    description: str = ""
    kind: str = ""
    reasons: Tuple[str, ...] = ()
    interval: timedelta = timedelta(hours=24)
    email_recipients: Tuple[str, ...] = ()
    namespace: str = ""


@dataclass
class Config:
    email_settings: EmailSettings = field(default_factory=EmailSettings)
    reports: Dict[str, ReportSpec] = field(default_factory=dict)

    @staticmethod
    def from_file(path: str | Path, env: Optional[Dict[str, str]] = None) -> "Config":
        try:
            raw_text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"could not read the config file: {exc}") from exc
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid configuration: {exc}") from exc
        return Config.from_dict(data or {}, env=env)

    @staticmethod
    def from_dict(data: Any, env: Optional[Dict[str, str]] = None) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("invalid configuration: top level must be a mapping")
        e = env if env is not None else os.environ

        email_settings = _parse_email_settings(_mapping(data.get("email_settings"), "email_settings"), e)
        reports: Dict[str, ReportSpec] = {}
        for name, raw_report in _mapping(data.get("reports"), "reports").items():
            reports[str(name)] = _parse_report(str(name), _mapping(raw_report, f"reports.{name}"))
        return Config(email_settings=email_settings, reports=reports)


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"invalid configuration: {where} must be a mapping")
    return value


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"invalid configuration: {where} must be a string")
    return value


def _string_list(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"invalid configuration: {where} must be a list of strings")
    return tuple(value)


def _env_override(env: Dict[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_email_settings(raw: Dict[str, Any], env: Dict[str, str]) -> EmailSettings:
    port = raw.get("port", 0)
    if port is None:
        port = 0
    if isinstance(port, bool) or not isinstance(port, int):
        raise ConfigError("invalid configuration: email_settings.port must be an integer")

    provider = _string(raw.get("provider"), "email_settings.provider").strip().lower() or DEFAULT_MAIL_PROVIDER
    if provider not in MAIL_PROVIDERS:
        raise ConfigError(
            f"invalid configuration: email_settings.provider must be one of {', '.join(MAIL_PROVIDERS)}"
        )

    password = _string(raw.get("password"), "email_settings.password")
    api_key = _string(raw.get("api_key"), "email_settings.api_key") or None

    return EmailSettings(
        smtp_server=_string(raw.get("smtp_server"), "email_settings.smtp_server"),
        port=port,
        username=_string(raw.get("username"), "email_settings.username"),
        password=_env_override(env, ENV_SMTP_PASSWORD) or password,
        from_email=_string(raw.get("from_email"), "email_settings.from_email") or DEFAULT_FROM_EMAIL,
        provider=provider,
        api_key=_env_override(env, ENV_MAIL_API_KEY) or api_key,
    )


def _parse_report(name: str, raw: Dict[str, Any]) -> ReportSpec:
    interval_text = _string(raw.get("interval"), f"reports.{name}.interval") or DEFAULT_INTERVAL
    try:
        interval = parse_duration(interval_text)
    except ConfigError as exc:
        raise ConfigError(f"cannot parse duration for interval of report {name}: {exc}") from exc
    if interval <= timedelta(0):
        raise ConfigError(f"interval of report {name} must be positive, got {interval_text!r}")

    return ReportSpec(
        description=_string(raw.get("description"), f"reports.{name}.description"),
        kind=_string(raw.get("kind"), f"reports.{name}.kind"),
        reasons=_string_list(raw.get("reasons"), f"reports.{name}.reasons"),
        interval=interval,
        email_recipients=_string_list(raw.get("email_recipients"), f"reports.{name}.email_recipients"),
        namespace=_string(raw.get("namespace"), f"reports.{name}.namespace"),
    )
