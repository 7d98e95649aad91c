import textwrap
from pathlib import Path

import pytest

from php_solid.session import AnalysisSession

FIXTURES = Path(__file__).parent / "fixtures"


def php(source: str) -> str:
    """Dedents an inline PHP snippet so ``<?php`` is the first thing in the file."""
    return textwrap.dedent(source).lstrip()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def write_php(tmp_path):
    def _write(source: str, name: str = "code.php") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(php(source), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def analyze(write_php):
    """
    Indexes a PHP snippet in a fresh AnalysisSession and returns the session.
    Pass ``session=`` to add more files to an existing one.
    """
    def _analyze(source: str, name: str = "code.php", session: AnalysisSession = None,
                 isp_threshold: int = 5) -> AnalysisSession:
        session = session or AnalysisSession(isp_threshold=isp_threshold)
        session.index_file(str(write_php(source, name)))
        return session
    return _analyze
