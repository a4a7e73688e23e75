"""Periodic email digests of cluster events."""

__all__ = [
    "config",
    "models",
    "event_client",
    "utils",
    "email_formatter",
    "mailer",
    "mailbox",
    "scheduler",
    "notifier",
    "orchestrator",
]
