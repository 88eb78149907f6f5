"""
Integration tests for the database connection pool

Tests the PostgreSQL connection pool functionality using testcontainers.
"""
import psycopg
import pytest

from field_validation.warehouse.connection import DatabaseConnectionPool


def make_pool(postgres_container, **kwargs) -> DatabaseConnectionPool:
    return DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_field_validation",
        user="test_validation",
        password="test_password",
        **kwargs,
    )


@pytest.mark.integration
def test_connection_pool_initialization(postgres_container):
    """Test that connection pool initializes correctly"""
    pool = make_pool(postgres_container, min_size=2, max_size=5)

    pool.open()

    assert pool._pool is not None
    assert pool._pool.min_size == 2
    assert pool._pool.max_size == 5

    pool.close()
    assert pool._pool is None


@pytest.mark.integration
def test_get_connection(postgres_container):
    """Test getting a connection from the pool"""
    with make_pool(postgres_container) as pool:
        with pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 as test")
                result = cur.fetchone()
                assert result["test"] == 1


@pytest.mark.integration
def test_transaction_rolls_back_on_error(postgres_container):
    """Test that a failing block leaves no partial writes"""
    with make_pool(postgres_container) as pool:
        pool.execute_command("CREATE TABLE IF NOT EXISTS pool_tx_test (id INT PRIMARY KEY)")
        pool.execute_command("TRUNCATE pool_tx_test")

        with pytest.raises(psycopg.errors.UniqueViolation):
            with pool.transaction() as cur:
                cur.execute("INSERT INTO pool_tx_test VALUES (1)")
                cur.execute("INSERT INTO pool_tx_test VALUES (1)")

        assert pool.execute_query("SELECT COUNT(*) AS n FROM pool_tx_test")[0]["n"] == 0
        pool.execute_command("DROP TABLE pool_tx_test")


@pytest.mark.integration
def test_unreachable_database_raises_after_retries():
    pool = DatabaseConnectionPool(
        host="127.0.0.1",
        port=1,
        database="nowhere",
        user="nobody",
        password="secret",
        timeout=1.0,
    )

    with pytest.raises(psycopg.OperationalError, match="after 2 attempts"):
        pool.open(max_retries=2, retry_delay=0)


@pytest.mark.unit
def test_pool_not_open():
    pool = DatabaseConnectionPool(password="secret")

    with pytest.raises(RuntimeError, match="not open"):
        with pool.get_connection():
            pass


@pytest.mark.unit
def test_password_required(monkeypatch):
    monkeypatch.delenv("DB_PASSWORD", raising=False)

    with pytest.raises(ValueError, match="password"):
        DatabaseConnectionPool()


@pytest.mark.unit
def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("DB_NAME", "rules")
    monkeypatch.setenv("DB_USER", "admin")
    monkeypatch.setenv("DB_PASSWORD", "secret")

    pool = DatabaseConnectionPool()

    assert (pool.host, pool.port, pool.database, pool.user) == ("db.internal", 6543, "rules", "admin")
    assert "host=db.internal" in pool.conninfo
