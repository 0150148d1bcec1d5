from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from punchclock import models  # noqa: F401
from punchclock.db import Base

ROOT = Path(__file__).resolve().parents[1]


class InitialMigrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.url = f"sqlite:///{Path(self._tmp.name) / 'punchclock.db'}"
        self.config = Config(str(ROOT / "alembic.ini"))
        self.config.set_main_option("sqlalchemy.url", self.url)

    def _inspect(self):  # type: ignore[no-untyped-def]
        engine = create_engine(self.url)
        self.addCleanup(engine.dispose)
        return inspect(engine)

    def test_upgrade_creates_model_tables(self) -> None:
        command.upgrade(self.config, "head")

        inspector = self._inspect()
        self.assertEqual(set(inspector.get_table_names()), set(Base.metadata.tables) | {"alembic_version"})
        for name, table in Base.metadata.tables.items():
            with self.subTest(table=name):
                columns = {column["name"] for column in inspector.get_columns(name)}
                self.assertEqual(columns, set(table.columns.keys()))

        unique = {item["name"] for item in inspector.get_unique_constraints("justifications")}
        self.assertIn("uq_justifications_employee_day", unique)

    def test_downgrade_removes_tables(self) -> None:
        command.upgrade(self.config, "head")
        command.downgrade(self.config, "base")

        self.assertEqual(self._inspect().get_table_names(), ["alembic_version"])


if __name__ == "__main__":
    unittest.main()
