"""
Pytest configuration and fixtures for field-validation tests

This module provides shared fixtures for unit and integration tests.
"""
import os
import pytest
from typing import Generator
from testcontainers.postgres import PostgresContainer

from field_validation.warehouse.connection import DatabaseConnectionPool
from field_validation.warehouse.rule_store import InMemoryRuleStore, RuleStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_validation",
        password="test_password",
        dbname="test_field_validation"
    ) as postgres:
        # Wait for container to be ready
        postgres.get_connection_url()
        yield postgres


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open a connection pool against the test container

    Args:
        postgres_container: PostgreSQL container fixture

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_field_validation",
        user="test_validation",
        password="test_password",
        min_size=1,
        max_size=5,
    )
    pool.open()
    yield pool
    pool.close()


@pytest.fixture(scope="function")
def rule_store(db_pool) -> Generator[RuleStore, None, None]:
    """
    Provide an installed, empty rule store for a single test

    Args:
        db_pool: Session-scoped connection pool

    Yields:
        RuleStore with a freshly created table
    """
    store = RuleStore(db_pool)
    store.install()
    db_pool.execute_command(f"TRUNCATE TABLE {store.table_name}")

    yield store

    store.uninstall()


@pytest.fixture(scope="function")
def memory_store() -> InMemoryRuleStore:
    """Provide an empty process-local rule store"""
    return InMemoryRuleStore()


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def test_env_vars(monkeypatch):
    """
    Set test environment variables

    This fixture loads config/test.env and sets its variables for one test
    """
    from dotenv import dotenv_values

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    values = dotenv_values(env_path)
    for key, value in values.items():
        monkeypatch.setenv(key, value)

    return values
