#!/usr/bin/env python
from __future__ import annotations

import json

from sqlalchemy import create_engine, inspect, text

from punchclock.services.tracking_modes import TrackingMode
from punchclock.settings import get_settings

REQUIRED_TABLES = ("employees", "projects", "time_records", "justifications", "audit_logs")


def run() -> dict:
    database_url = get_settings().database_url
    engine = create_engine(database_url)
    report: dict = {
        "database_url": engine.url.render_as_string(hide_password=True),
        "checks": [],
    }

    def add(name: str, status: str, details: dict) -> None:
        report["checks"].append(
            {
                "name": name,
                "status": status,
                "details": details,
            }
        )

    tables = set(inspect(engine).get_table_names())
    missing = [table for table in REQUIRED_TABLES if table not in tables]
    add("missing_tables", "fail" if missing else "ok", {"missing": missing})
    if missing:
        return report

    known_modes = {mode.value for mode in TrackingMode}
    with engine.connect() as conn:
        modes = conn.execute(
            text(
                """
                select id, tracking_mode
                from projects
                where tracking_mode is not null
                """
            )
        ).fetchall()
        unknown = [{"project_id": row[0], "tracking_mode": row[1]} for row in modes if row[1].upper() not in known_modes]
        add("projects_unknown_tracking_mode", "warn" if unknown else "ok", {"rows": unknown})

        orphan_projects = conn.execute(
            text(
                """
                select t.id
                from time_records t
                left join projects p on p.id = t.project_id
                where p.id is null
                limit 20
                """
            )
        ).fetchall()
        add(
            "time_records_orphan_project",
            "fail" if orphan_projects else "ok",
            {"sample_ids": [row[0] for row in orphan_projects]},
        )

        same_instant = conn.execute(
            text(
                """
                select employee_id, project_id, ts_utc, count(*)
                from time_records
                group by employee_id, project_id, ts_utc
                having count(*) > 1
                limit 20
                """
            )
        ).fetchall()
        add(
            "time_records_same_instant",
            "warn" if same_instant else "ok",
            {"rows": [[row[0], row[1], str(row[2]), row[3]] for row in same_instant]},
        )

    return report


if __name__ == "__main__":
    print(json.dumps(run(), ensure_ascii=False, indent=2))
