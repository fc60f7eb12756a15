#!/usr/bin/env python3
"""Print the maintenance statement of one association as JSON."""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from avizier.api.statements import serialize_statement  # noqa: E402
from avizier.config import SessionLocal, settings  # noqa: E402
from avizier.core.logging import configure_logging  # noqa: E402
from avizier.services.allocation import extended_rules  # noqa: E402
from avizier.services.snapshot import Period, load_snapshot, snapshot_summary  # noqa: E402
from avizier.services.statements import assemble_statement, default_as_of  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("association_id", type=int)
    parser.add_argument("--year", type=int, default=date.today().year)
    parser.add_argument("--month", type=int, default=date.today().month)
    parser.add_argument("--as-of", type=datetime.fromisoformat, default=None, help="ISO timestamp for penalties.")
    args = parser.parse_args()

    configure_logging(settings.log_level.upper(), json_logs=settings.json_logs)
    with SessionLocal() as session:
        snapshot = load_snapshot(session, args.association_id)
    print(f"Loaded {snapshot_summary(snapshot)}", file=sys.stderr)

    rules = extended_rules(
        snapshot,
        metered_consumption=settings.metered_consumption,
        manual_allocations=settings.manual_allocations,
    )
    statement = assemble_statement(snapshot, Period(args.year, args.month), args.as_of or default_as_of(), rules)
    print(serialize_statement(statement).model_dump_json(indent=2))


if __name__ == "__main__":
    main()
