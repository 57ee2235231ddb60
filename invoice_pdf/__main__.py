"""Module entrypoint for running the invoice PDF server."""

from __future__ import annotations

import logging
import sys

from .config import get_settings
from .errors import DependencyError
from .server import run


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()
    try:
        run(settings.host, settings.port, settings)
    except DependencyError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
