import logging

from sqlalchemy import text

from marketplace.database import _server_pool_options, build_engine, log_slow_queries


def test_sqlite_engine_connects():
    db_engine = build_engine("sqlite://")

    with db_engine.connect() as conn:
        assert conn.execute(text("SELECT 1")).scalar() == 1


def test_server_pool_options_from_env(monkeypatch):
    monkeypatch.setenv("DB_POOL_SIZE", "7")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "3")

    options = _server_pool_options()

    assert options["pool_size"] == 7
    assert options["max_overflow"] == 3
    assert options["pool_pre_ping"] is True


def test_slow_queries_are_logged(caplog):
    db_engine = build_engine("sqlite://")
    log_slow_queries(db_engine, threshold=-1)

    with caplog.at_level(logging.WARNING, logger="marketplace.database"):
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    assert any("Slow query" in record.message for record in caplog.records)
