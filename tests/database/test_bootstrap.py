from pathlib import Path

from src.mess_attendance.mess_attendance.database.bootstrap import (
    _strip_create_db_and_use,
    _strip_line_comments,
    iter_sql_statements,
)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_splitter_ignores_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]


def test_schema_reduces_to_table_statements_only():
    sql = SCHEMA_PATH.read_text(encoding="utf-8")
    statements = list(iter_sql_statements(_strip_line_comments(_strip_create_db_and_use(sql))))

    assert len(statements) == 1
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS attendance_logs")
    assert "idx_unique_valid_meal_attendance" in statements[0]
