"""Pytest configuration and shared fixtures for the fb2md test suite."""

from pathlib import Path

import pytest

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures" / "fb2"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture(scope="session")
def fb2_fixture_dir() -> Path:
    """Directory holding the FB2 sample documents."""
    return FIXTURE_DIR


@pytest.fixture(scope="session")
def sample_fb2_path(fb2_fixture_dir: Path) -> Path:
    """Path of the full-featured sample book."""
    return fb2_fixture_dir / "sample.fb2"
