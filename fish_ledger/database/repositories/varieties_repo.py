import sqlite3

from ...modules.ledger.types import Variety


class DomainError(Exception):
    """Domain-level error raised for validation / constraint issues."""
    pass


class VarietiesRepo:
    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def list_varieties(self) -> list[Variety]:
        rows = self.conn.execute(
            "SELECT code, name FROM fish_varieties ORDER BY name, code"
        ).fetchall()
        return [Variety(**dict(r)) for r in rows]

    def get(self, code: str) -> Variety | None:
        r = self.conn.execute(
            "SELECT code, name FROM fish_varieties WHERE code=?",
            ((code or "").strip().upper(),)
        ).fetchone()
        return Variety(**dict(r)) if r else None

    def names(self) -> dict[str, str]:
        return {v.code: v.name for v in self.list_varieties()}

    def create(self, code: str, name: str) -> str:
        code_n = (code or "").strip().upper()
        name_n = (name or "").strip()
        if not code_n or not name_n:
            raise DomainError("Variety code and name are required.")
        try:
            self.conn.execute(
                "INSERT INTO fish_varieties(code, name) VALUES (?, ?)",
                (code_n, name_n)
            )
        except sqlite3.IntegrityError as e:
            raise DomainError(f"Variety '{code_n}' already exists.") from e
        return code_n

    def delete(self, code: str):
        """Referenced varieties are kept (FK RESTRICT); surface that as DomainError."""
        try:
            self.conn.execute(
                "DELETE FROM fish_varieties WHERE code=?",
                ((code or "").strip().upper(),)
            )
        except sqlite3.IntegrityError as e:
            raise DomainError("Variety is used in loadings and cannot be deleted.") from e
