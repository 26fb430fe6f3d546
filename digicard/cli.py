"""
Digicard Command Line Interface.

Provides commands for issuing, refreshing and expiring student ID cards from a
JSON student record. Wallet credentials are read from DIGICARD_* environment
variables (see digicard.config).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from digicard.config import print_config
from digicard.errors import DigicardError
from digicard.record import StudentRecord


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def load_record(path: str) -> StudentRecord:
    """Read a student record from a JSON file ('-' for stdin)."""
    if path == '-':
        return StudentRecord.from_json(sys.stdin.read())
    return StudentRecord.from_json(Path(path).read_text(encoding='utf-8'))


def _google_card():
    from digicard.google import GoogleCard

    return GoogleCard.from_env()


def _apple_card():
    from digicard.apple import AppleCard

    return AppleCard.from_env()


def cmd_google_link(args: argparse.Namespace) -> int:
    """Create or update the wallet object and print the save link."""
    card = _google_card()
    if args.ensure_class and card.ensure_class():
        print(f"Created wallet class {card.config.class_id}", file=sys.stderr)
    print(card.issue_or_refresh(load_record(args.record)))
    return 0


def cmd_google_update(args: argparse.Namespace) -> int:
    """Refresh an existing wallet object."""
    resource = _google_card().update(load_record(args.record))
    print(resource.get('id', ''))
    return 0


def cmd_google_expire(args: argparse.Namespace) -> int:
    """Expire a wallet object."""
    print(_google_card().expire(load_record(args.record)))
    return 0


def cmd_apple_pass(args: argparse.Namespace) -> int:
    """Issue a signed pass archive."""
    archive = _apple_card().issue(load_record(args.record))
    output = Path(args.output) if args.output else Path(archive.filename)
    archive.save(output)
    print(output)
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print endpoint configuration."""
    print_config()
    return 0


COMMANDS = {
    'google-link': cmd_google_link,
    'google-update': cmd_google_update,
    'google-expire': cmd_google_expire,
    'apple-pass': cmd_apple_pass,
    'config': cmd_config,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='digicard',
        description='Digicard CLI - Digital student ID cards for mobile wallets'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # google-link command
    p_link = subparsers.add_parser('google-link', help='Issue or refresh a wallet object and print the save link')
    p_link.add_argument('record', help='Student record JSON file (- for stdin)')
    p_link.add_argument('--ensure-class', action='store_true', help='Create the wallet class if missing')

    # google-update command
    p_update = subparsers.add_parser('google-update', help='Refresh an existing wallet object')
    p_update.add_argument('record', help='Student record JSON file (- for stdin)')

    # google-expire command
    p_expire = subparsers.add_parser('google-expire', help='Expire a wallet object')
    p_expire.add_argument('record', help='Student record JSON file (- for stdin)')

    # apple-pass command
    p_pass = subparsers.add_parser('apple-pass', help='Issue a signed .pkpass archive')
    p_pass.add_argument('record', help='Student record JSON file (- for stdin)')
    p_pass.add_argument('-o', '--output', help='Output path (default: <id>.pkpass)')

    subparsers.add_parser('config', help='Show endpoint configuration')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading record: {e}", file=sys.stderr)
        return 1
    except DigicardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
