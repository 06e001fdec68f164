"""Pytest configuration for the Kix test suite."""

import io
from dataclasses import dataclass

import pytest

from kix.config import KixConfig
from kix.diagnostics import ColorMode, DiagnosticFormatter, Reporter
from kix.session import Session


@dataclass
class RunResult:
    """Captured output of one run through the pipeline."""

    out: str
    err: str
    session: Session

    @property
    def had_error(self) -> bool:
        return self.session.reporter.had_error

    @property
    def had_runtime_error(self) -> bool:
        return self.session.reporter.had_runtime_error


def make_session(**options) -> Session:
    """Session with plain (uncoloured) diagnostics."""
    return Session(KixConfig(color_mode=ColorMode.NEVER, **options))


def make_reporter() -> Reporter:
    """Reporter writing into a private buffer, read back via .stream.getvalue()."""
    return Reporter(DiagnosticFormatter(ColorMode.NEVER), stream=io.StringIO())


@pytest.fixture
def run(capsys):
    """Run source text, returning stdout, stderr and the session used."""

    def _run(source: str, session: Session = None, **options) -> RunResult:
        session = session or make_session(**options)
        session.run(source)
        captured = capsys.readouterr()
        return RunResult(captured.out, captured.err, session)

    return _run
