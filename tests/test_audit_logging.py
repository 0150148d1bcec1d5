from __future__ import annotations

import json
import logging
import unittest
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from punchclock.audit import log_audit
from punchclock.logging_utils import JsonFormatter
from punchclock.models import AuditActorType, AuditLog


class AuditLogTests(unittest.TestCase):
    def test_successful_write_commits_row(self) -> None:
        db = Mock()

        ok = log_audit(
            db,
            actor_type=AuditActorType.EMPLOYEE,
            actor_id="7",
            action="PUNCH_RECORDED",
            entity_type="time_record",
            entity_id="11",
            details={"kind": "CLIENT_ARRIVAL"},
        )

        self.assertTrue(ok)
        row = db.add.call_args.args[0]
        self.assertIsInstance(row, AuditLog)
        self.assertEqual(row.details, {"kind": "CLIENT_ARRIVAL"})
        db.commit.assert_called_once()

    def test_failed_write_rolls_back_and_reports(self) -> None:
        db = Mock()
        db.commit.side_effect = OperationalError("insert", {}, Exception("db down"))

        with self.assertLogs("punchclock.audit", level="ERROR") as logs:
            ok = log_audit(db, actor_type=AuditActorType.SYSTEM, actor_id="system", action="PUNCH_RECORDED")

        self.assertFalse(ok)
        db.rollback.assert_called_once()
        self.assertIn("audit_log_write_failed", logs.output[0])


class JsonFormatterTests(unittest.TestCase):
    def test_extra_fields_are_serialized(self) -> None:
        record = logging.makeLogRecord(
            {
                "name": "punchclock.request",
                "levelname": "INFO",
                "msg": "request_complete",
                "request_id": "req-1",
                "status_code": 200,
            }
        )

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual(payload["message"], "request_complete")
        self.assertEqual(payload["logger"], "punchclock.request")
        self.assertEqual(payload["request_id"], "req-1")
        self.assertEqual(payload["status_code"], 200)
        self.assertNotIn("args", payload)


if __name__ == "__main__":
    unittest.main()
