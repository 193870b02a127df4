import nox

PYTHON_VERSIONS = ["3.10", "3.11", "3.12"]
STYLE_TARGETS = ("src", "tests", "noxfile.py")

nox.options.reuse_existing_virtualenvs = True
nox.options.error_on_missing_interpreters = False
nox.options.sessions = ("lint", "tests")


def install_with_dev(session: nox.Session) -> None:
    """Install the project with dev dependencies enabled."""
    session.install("-e", ".[dev]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run unit tests with pytest (extra args are passed through)."""
    install_with_dev(session)
    session.run("pytest", "-q", "--disable-warnings", "--maxfail=1", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def coverage(session: nox.Session) -> None:
    """Unit tests with a coverage report for both packages."""
    install_with_dev(session)
    session.run("pytest", "-q", "--cov=core", "--cov=kmerscan", "--cov-report=term-missing")


@nox.session(python=PYTHON_VERSIONS[-1])
def typecheck(session: nox.Session) -> None:
    """Static type checking via MyPy."""
    install_with_dev(session)
    session.run("mypy", "src")


@nox.session(python=PYTHON_VERSIONS[-1])
def lint(session: nox.Session) -> None:
    """Format check via Black and lint with Ruff (no fixes)."""
    session.install("black", "ruff")
    session.run("black", "--check", *STYLE_TARGETS)
    session.run("ruff", "check", *STYLE_TARGETS)


@nox.session(python=PYTHON_VERSIONS[-1])
def fmt(session: nox.Session) -> None:
    """Format with Black and fix import ordering with Ruff."""
    session.install("black", "ruff")
    session.run("black", *STYLE_TARGETS)
    session.run("ruff", "check", "--select", "I", "--fix", *STYLE_TARGETS)


@nox.session(python=PYTHON_VERSIONS)
def ci(session: nox.Session) -> None:
    """
    Convenience all-in-one session for CI:
    format check (non-mutating), lint, typecheck, tests.
    """
    install_with_dev(session)
    session.run("black", "--check", *STYLE_TARGETS)
    session.run("ruff", "check", *STYLE_TARGETS)
    session.run("mypy", "src")
    session.run("pytest", "-q", "--disable-warnings", "--maxfail=1")
