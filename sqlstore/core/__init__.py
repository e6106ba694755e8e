"""
Core primitives shared across the sqlstore package.

This package hosts:
- configuration helpers (SQLConfig read from env vars)
- the cancellable execution Context handed to every storage call
- the error taxonomy and the structlog/SQL logging setup

Repositories and the db layer depend on these instead of reading os.environ
or configuring logging on their own.
"""
