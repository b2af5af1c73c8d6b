"""Console entrypoint bridging to :mod:`dlmmbot.app`."""

from __future__ import annotations

from typing import Optional

from .app import main as app_main


def main(argv: Optional[list[str]] = None) -> int:
    """Delegate execution to :func:`dlmmbot.app.main`."""

    return app_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
