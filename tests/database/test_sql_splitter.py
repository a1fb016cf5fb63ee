from __future__ import annotations

from src.duty_roster.duty_roster.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use


def test_splits_on_semicolons_outside_quotes():
    sql = "INSERT INTO posts (name) VALUES ('Gate; North');\nINSERT INTO posts (name) VALUES (\"Yard\");"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO posts (name) VALUES ('Gate; North')",
        'INSERT INTO posts (name) VALUES ("Yard")',
    ]


def test_skips_line_comments():
    sql = "-- posts; seeded below\nSELECT 1; -- trailing\nSELECT 2"
    assert list(_iter_sql_statements(sql)) == ["SELECT 1", "SELECT 2"]


def test_escaped_quote_does_not_end_string():
    sql = "INSERT INTO t VALUES ('it\\'s; fine');SELECT 3;"
    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('it\\'s; fine')", "SELECT 3"]


def test_strip_create_db_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS duty_roster;\nUSE duty_roster;\nCREATE TABLE posts (id INT);"
    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE posts (id INT)"]
