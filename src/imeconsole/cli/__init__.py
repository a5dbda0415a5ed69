"""Command-line entry point (``ime-console``).

Commands import the console, configuration and engine packages lazily,
so ``ime-console --help`` stays fast and does not load any engine.
"""
from __future__ import annotations
