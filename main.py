from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from events_reporter import config
from events_reporter.event_client import ClusterConfigError, KubeEventClient, load_cluster_config
from events_reporter.mailer import MailConfigError, build_mailer
from events_reporter.orchestrator import run

logger = logging.getLogger("events_reporter")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Email periodic digests of cluster events."
    )
    parser.add_argument("--config-path", default="", help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="e.g. DEBUG, INFO, WARNING")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    if not args.config_path:
        logger.error("Invalid options: --config-path was not provided")
        sys.exit(1)

    try:
        cluster_config = load_cluster_config()
    except ClusterConfigError as exc:
        logger.error("Failed to load cluster config: %s", exc)
        sys.exit(1)

    try:
        client = KubeEventClient(cluster_config)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to initialize kubernetes client: %s", exc)
        sys.exit(1)

    try:
        settings = config.Config.from_file(args.config_path)
    except config.ConfigError as exc:
        logger.error("Failed to load config: %s", exc)
        sys.exit(1)

    try:
        mailer = build_mailer(settings.email_settings)
    except MailConfigError as exc:
        logger.error("Invalid email settings: %s", exc)
        sys.exit(1)

    stop = threading.Event()

    def _terminate(signum, _frame) -> None:
        logger.warning("Event reporter is terminating (signal %s)...", signum)
        stop.set()

    signal.signal(signal.SIGINT, _terminate)
    signal.signal(signal.SIGTERM, _terminate)

    try:
        run(settings, client, stop, mailer=mailer)
    finally:
        client.close()
    logger.info("Exiting...")


if __name__ == "__main__":
    main()
