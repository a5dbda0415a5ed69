#!/usr/bin/env python3
"""Example: Quickstart — ime-console

Minimal working example: drive the in-process engine through a short
console script with two sessions.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install ime-console
"""
from __future__ import annotations

import imeconsole

SCRIPT = [
    "print schema list",
    "ni",
    "{Page_Down}",
    "select candidate 2",
    "add session",
    "select schema demo_latin",
    "a{Down}{space}",
    "set option full_shape",
    "!",
    "ls sessions",
    "kill session 1",
    "exit",
]


def main() -> None:
    print(f"ime-console version: {imeconsole.__version__}")

    # The memory engine ships two demo schemas; pass schemas_file= to load more.
    engine = imeconsole.create_engine("memory")

    exit_code = imeconsole.run_console(SCRIPT, engine=engine)
    print(f"\nconsole exited with code {exit_code}")


if __name__ == "__main__":
    main()
