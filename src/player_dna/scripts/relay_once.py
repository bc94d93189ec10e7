"""Run a single oracle relay pass against the configured database."""
from __future__ import annotations

import argparse
import logging
import sys

from player_dna.db.session import session_scope
from player_dna.services.oracle_relay import get_oracle_relay


def main() -> None:
    parser = argparse.ArgumentParser(description="Fulfill pending oracle requests once")
    parser.add_argument("--limit", type=int, default=None, help="Maximum requests to process")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        relay = get_oracle_relay()
    except RuntimeError as exc:
        print(f"[relay_once] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    with session_scope() as db:
        completed = relay.process_pending(db, limit=args.limit)
    print(f"[relay_once] completed {completed} request(s)")


if __name__ == "__main__":
    main()
