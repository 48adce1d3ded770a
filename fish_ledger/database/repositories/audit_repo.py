from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class AuditEntry:
    log_id: int
    action_type: str
    table_name: str
    record_id: str | None
    action_time: str | None
    old_values: Dict[str, Any] | None
    new_values: Dict[str, Any] | None


def diff_values(
    old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]
) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """
    Keep only the keys whose value changed.
    A create has no old side, a delete no new side; those pass through whole.
    """
    if old is None or new is None:
        return old, new
    changed = [k for k in sorted(set(old) | set(new)) if old.get(k) != new.get(k)]
    return {k: old.get(k) for k in changed}, {k: new.get(k) for k in changed}


class AuditRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def log(
        self,
        action_type: str,
        table_name: str,
        record_id: Any,
        old: Optional[Dict[str, Any]] = None,
        new: Optional[Dict[str, Any]] = None,
    ) -> Optional[int]:
        old_d, new_d = diff_values(old, new)
        if action_type == "UPDATE" and not old_d and not new_d:
            return None  # nothing changed
        cur = self.conn.execute(
            """
            INSERT INTO audit_logs(action_type, table_name, record_id, old_values, new_values)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                action_type,
                table_name,
                None if record_id is None else str(record_id),
                json.dumps(old_d, sort_keys=True) if old_d is not None else None,
                json.dumps(new_d, sort_keys=True) if new_d is not None else None,
            ),
        )
        return int(cur.lastrowid)

    def list_for(self, table_name: str, record_id: Any | None = None) -> List[AuditEntry]:
        sql = (
            "SELECT log_id, action_type, table_name, record_id, action_time, old_values, new_values "
            "FROM audit_logs WHERE table_name=?"
        )
        params: list = [table_name]
        if record_id is not None:
            sql += " AND record_id=?"
            params.append(str(record_id))
        rows = self.conn.execute(sql + " ORDER BY log_id", params).fetchall()
        out = []
        for r in rows:
            d = dict(r)
            d["old_values"] = json.loads(d["old_values"]) if d["old_values"] else None
            d["new_values"] = json.loads(d["new_values"]) if d["new_values"] else None
            out.append(AuditEntry(**d))
        return out
