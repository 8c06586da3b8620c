"""
Migration Discovery Tests (no database required)
"""

from bagshare.store.migrations import DEFAULT_MIGRATIONS_DIR, checksum, pending_migrations


class TestPendingMigrations:

    def test_numbered_files_in_order(self, tmp_path):
        for name in ["002_b.sql", "001_a.sql", "notes.sql", "003_c.txt"]:
            (tmp_path / name).write_text("SELECT 1;")

        assert [p.name for p in pending_migrations(tmp_path, set())] == ["001_a.sql", "002_b.sql"]

    def test_executed_skipped(self, tmp_path):
        (tmp_path / "001_a.sql").write_text("SELECT 1;")
        (tmp_path / "002_b.sql").write_text("SELECT 2;")

        assert [p.name for p in pending_migrations(tmp_path, {"001_a.sql"})] == ["002_b.sql"]

    def test_missing_dir(self, tmp_path):
        assert pending_migrations(tmp_path / "nope", set()) == []

    def test_schema_shipped(self):
        names = [p.name for p in pending_migrations(DEFAULT_MIGRATIONS_DIR, set())]
        assert "001_bagshare_schema.sql" in names

    def test_checksum_stable(self):
        assert checksum("abc") == checksum("abc")
        assert checksum("abc") != checksum("abd")
