#!/usr/bin/env python3
"""Run the statement service locally with auto-reload.

Usage:
    python scripts/start_dev.py --port 8000
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import uvicorn

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEFAULT_PORT = int(os.environ.get("AVIZIER_PORT", "8000"))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload.")
    args = parser.parse_args()

    uvicorn.run(
        "avizier.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        app_dir=str(ROOT),
    )


if __name__ == "__main__":
    main()
