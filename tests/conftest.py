"""Pytest fixtures for Markform parser tests."""

from pathlib import Path

import pytest

from parsers import parse_markform
from schema import ParsedForm

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def forms_dir() -> Path:
    """Directory with the junior/senior forms plus one broken and one role-less form."""
    return FIXTURES_DIR


@pytest.fixture
def junior_text() -> str:
    return (FIXTURES_DIR / "junior-implementation.form.md").read_text(encoding="utf-8")


@pytest.fixture
def senior_text() -> str:
    return (FIXTURES_DIR / "senior-implementation.form.md").read_text(encoding="utf-8")


@pytest.fixture
def junior_form(junior_text) -> ParsedForm:
    return parse_markform(junior_text)


@pytest.fixture
def senior_form(senior_text) -> ParsedForm:
    return parse_markform(senior_text)
