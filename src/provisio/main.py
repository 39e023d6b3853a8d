#!/usr/bin/env python3

from __future__ import annotations

from signal import SIGINT, signal

from dotenv import load_dotenv

from provisio.ui.cli import main, sigint_handler


def run() -> None:
    """Console entry point: load ``.env``, trap Ctrl+C, run the CLI."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
