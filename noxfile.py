"""nox build configuration for clientorigin."""

from __future__ import annotations

import nox

# Default sessions
nox.options.sessions = ["lint", "typing", "test"]

# Other nox defaults
nox.options.reuse_existing_virtualenvs = True


@nox.session
def lint(session: nox.Session) -> None:
    """Run ruff over the source and tests."""
    session.install("ruff")
    session.run("ruff", "check", "noxfile.py", "src", "tests")
    session.run("ruff", "format", "--check", "noxfile.py", "src", "tests")


@nox.session
def test(session: nox.Session) -> None:
    """Run the test suite."""
    session.install("-e", ".[dev]")
    session.run("pytest", *session.posargs)


@nox.session
def typing(session: nox.Session) -> None:
    """Check type annotations with mypy."""
    session.install("-e", ".[dev]")
    session.run("mypy", *session.posargs, "noxfile.py", "src", "tests")
