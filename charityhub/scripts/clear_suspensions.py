from __future__ import annotations

import argparse
import logging

from charityhub.core.db import SessionLocal
from charityhub.services.accounts import clear_expired_suspensions


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reactivate accounts whose suspension period has ended.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each cleared account")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    with SessionLocal() as session:
        cleared = clear_expired_suspensions(session)
    print(f"Cleared {cleared} expired suspension(s).")


if __name__ == "__main__":
    main()
