"""Create the registry tables and bootstrap the registry from settings."""
from __future__ import annotations

import argparse
import sys

from player_dna.db.session import create_tables, session_scope
from player_dna.services.registry import Registry, RegistryConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and initialize the registry")
    parser.add_argument(
        "--skip-bootstrap",
        action="store_true",
        help="Only create tables; do not write the initial registry state.",
    )
    args = parser.parse_args()

    create_tables()
    print("[init_db] tables created")
    if args.skip_bootstrap:
        return

    try:
        config = RegistryConfig.from_settings()
    except ValueError as exc:
        print(f"[init_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    with session_scope() as db:
        state = Registry(db).initialize(config)
        print(
            f"[init_db] registry {state.identity} owned by {state.owner}, "
            f"current batch {state.current_batch_id}"
        )


if __name__ == "__main__":
    main()
