from __future__ import annotations

from pathlib import Path
import platform
import sys
from typing import TYPE_CHECKING

import nox

if TYPE_CHECKING:
    from nox.sessions import Session

nox.options.default_venv_backend = "uv"
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ["lint", "typing", "test"]

PYTHON_VERSIONS = ["3.12", "3.13"]
COVER_MIN = 80


def constraints(session: Session) -> Path:
    """Return the pinned constraints file for the session interpreter."""
    filename = f"python{session.python}-{sys.platform}-{platform.machine()}.txt"
    return Path("constraints", filename)


def install_dev(session: Session) -> None:
    """Install the project with its dev extra, honouring constraints when locked."""
    pinned = constraints(session)
    if pinned.exists():
        session.install("-c", pinned.as_posix(), "-e", ".[dev]")
    else:
        session.install("-e", ".[dev]")


@nox.session(python=PYTHON_VERSIONS[-1], venv_backend="uv")
def lock(session: Session) -> None:
    """Pin dependencies for the current platform."""
    filename = constraints(session)
    filename.parent.mkdir(exist_ok=True)
    session.run(
        "uv",
        "pip",
        "compile",
        "pyproject.toml",
        "--upgrade",
        "--quiet",
        "--all-extras",
        f"--output-file={filename}",
    )


@nox.session(python=PYTHON_VERSIONS[-1], tags=["lint"])
def lint(session: Session) -> None:
    """Lint, sort imports and check formatting with Ruff."""
    session.install("ruff")
    session.run("ruff", "check", "src", "tests", "noxfile.py")
    session.run("ruff", "format", "--check", "src", "tests", "noxfile.py")


@nox.session(python=PYTHON_VERSIONS[-1], tags=["typing"])
def typing(session: Session) -> None:
    """Run type checking with Pyright."""
    install_dev(session)
    session.run("pyright")


@nox.session(python=PYTHON_VERSIONS, tags=["test"])
def test(session: Session) -> None:
    """Run the test suite with coverage."""
    install_dev(session)
    session.run("pytest", "--cov=pycaliper", f"--cov-fail-under={COVER_MIN}", *session.posargs)
