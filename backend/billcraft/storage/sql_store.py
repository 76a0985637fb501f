# Overview: SQLAlchemy-backed TableStore; one instance per model.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .base import StorageError, TableStore

PROTECTED_FIELDS = {"id", "owner_id", "created_at", "updated_at"}


class SqlTableStore(TableStore):
    """
    TableStore over a Flask-SQLAlchemy model that carries owner_id.

    Every write commits immediately. On failure the session is rolled back
    so prior state is left unchanged, and StorageError is raised.
    """

    def __init__(self, model):
        self.model = model
        self._columns = {c.key for c in model.__mapper__.columns}

    def _query(self, owner_id: int):
        return db.session.query(self.model).filter(self.model.owner_id == owner_id)

    def _fail(self, action: str, exc: Exception):
        db.session.rollback()
        raise StorageError(f"{self.model.__tablename__} {action} failed") from exc

    def list(self, owner_id: int, *, order_by: str | None = None, descending: bool = False) -> list[dict]:
        column = getattr(self.model, order_by or "id")
        ordering = [column.desc(), self.model.id.desc()] if descending else [column.asc(), self.model.id.asc()]
        try:
            rows = self._query(owner_id).order_by(*ordering).all()
        except SQLAlchemyError as exc:
            self._fail("list", exc)
        return [row.to_dict() for row in rows]

    def find(self, owner_id: int, **filters) -> list[dict]:
        try:
            rows = self._query(owner_id).filter_by(**filters).order_by(self.model.id.asc()).all()
        except SQLAlchemyError as exc:
            self._fail("find", exc)
        return [row.to_dict() for row in rows]

    def get(self, owner_id: int, record_id: int) -> dict | None:
        try:
            row = self._query(owner_id).filter(self.model.id == record_id).first()
        except SQLAlchemyError as exc:
            self._fail("get", exc)
        return row.to_dict() if row else None

    def insert(self, owner_id: int, record: dict) -> dict:
        values = {k: v for k, v in record.items() if k in self._columns and k not in {"id", "owner_id"}}
        row = self.model(owner_id=owner_id, **values)
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("insert", exc)
        return row.to_dict()

    def update(self, owner_id: int, record_id: int, patch: dict) -> dict | None:
        try:
            row = self._query(owner_id).filter(self.model.id == record_id).first()
            if row is None:
                return None
            for k, v in patch.items():
                if k in self._columns and k not in PROTECTED_FIELDS:
                    setattr(row, k, v)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("update", exc)
        return row.to_dict()

    def delete(self, owner_id: int, record_id: int) -> bool:
        try:
            row = self._query(owner_id).filter(self.model.id == record_id).first()
            if row is None:
                return False
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("delete", exc)
        return True
