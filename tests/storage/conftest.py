"""
Storage tests run against a temporary directory only.
"""
import pytest


@pytest.fixture(scope="session")
def setup_database():
    """No migrations needed: storage tests never open a database session."""
    yield
