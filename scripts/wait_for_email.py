"""Entry point that waits for one email to land in a Vanish mailbox."""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from dotenv import load_dotenv

from vanish.cancel import CancelToken
from vanish.client import VanishClient
from vanish.config import Settings
from vanish.errors import CancelledError, VanishError
from vanish.models import GenerateEmailOptions, ListEmailsOptions

logger = logging.getLogger("wait_for_email")

EXIT_FOUND = 0
EXIT_TIMEOUT = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wait for an email to arrive in a temporary mailbox.")
    parser.add_argument("--address", help="Existing mailbox to watch; a new one is generated when omitted")
    parser.add_argument("--domain", help="Domain for the generated mailbox")
    parser.add_argument("--prefix", help="Local-part prefix for the generated mailbox")
    parser.add_argument("--timeout", type=positive_float, help="Seconds to wait before giving up")
    parser.add_argument("--interval", type=positive_float, help="Seconds between mailbox checks")
    parser.add_argument("--show-body", action="store_true", help="Fetch the email and print its text body")
    return parser


def positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not a number: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return parsed


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def run(client: VanishClient, args: argparse.Namespace, settings: Settings, token: CancelToken) -> int:
    address = args.address
    if not address:
        options = GenerateEmailOptions(domain=args.domain, prefix=args.prefix)
        address = client.generate_email(options, token=token)
        logger.info("Generated mailbox %s", address)
    print(address, flush=True)

    baseline = client.list_emails(address, ListEmailsOptions(limit=1), token=token).total
    timeout = args.timeout or settings.poll_timeout
    interval = args.interval or settings.poll_interval
    logger.info("Waiting up to %ss for mail to %s (%s already present)", timeout, address, baseline)

    summary = client.poll_for_emails(address, timeout, interval, initial_count=baseline, token=token)
    if summary is None:
        logger.warning("No new email for %s within %ss", address, timeout)
        return EXIT_TIMEOUT

    print(f"{summary.received_at} {summary.sender}: {summary.subject}")
    if args.show_body:
        detail = client.get_email(summary.id, token=token)
        print(detail.text)
        for attachment in detail.attachments or []:
            print(f"[attachment] {attachment.name} ({attachment.type}, {attachment.size} bytes)")
    return EXIT_FOUND


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    load_dotenv()
    settings = Settings()
    configure_logging(settings.log_level)

    token = CancelToken()
    signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())

    with VanishClient.from_settings(settings) as client:
        try:
            code = run(client, args, settings, token)
        except CancelledError:
            logger.info("Interrupted")
            code = EXIT_INTERRUPTED
        except VanishError as exc:
            logger.error("%s", exc)
            code = EXIT_ERROR
    sys.exit(code)


if __name__ == "__main__":
    main()
