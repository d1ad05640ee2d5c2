"""Pytest configuration for MCP server tests."""

import shutil
import tempfile

import pytest


@pytest.fixture
def state_dir():
    """Create a temporary state directory for one test."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)
