"""Integration tests.

These drive the ``ime-console`` command through ``click.testing`` with
the in-process memory engine, covering configuration loading, engine
lookup and the full read loop.  Run only the fast unit tests with
``pytest tests/unit/``.
"""
