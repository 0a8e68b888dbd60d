import pytest

from fee_statement.statement_store import LocalStatementCache, SqliteVersionStore, StatementRepository


@pytest.fixture
def repository(tmp_path):
    return StatementRepository(
        LocalStatementCache(tmp_path / "cache"),
        SqliteVersionStore(tmp_path / "versions.db"),
    )
