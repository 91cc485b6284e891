# repositories/base.py
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Query, Session

from models.users import User
from utils.errors import PolicyViolation
from utils.policies import Operation, enforce_check, using_clause


class PolicyRepository:
    """Data access bound to a requesting identity.

    Every query is narrowed by the table's policies, so rows the identity may
    not see are simply absent. ``identity`` is None for anonymous callers.
    """

    model = None

    def __init__(self, db: Session, identity: Optional[User] = None):
        self.db = db
        self.identity = identity

    @property
    def table(self) -> str:
        return self.model.__tablename__

    @property
    def uid(self) -> Optional[uuid.UUID]:
        return self.identity.id if self.identity is not None else None

    def query(self, operation: Operation = Operation.SELECT) -> Query:
        clause = using_clause(self.table, Operation.SELECT, self.uid)
        if operation is not Operation.SELECT:
            # Targeting a row for update/delete also requires being able to see it
            clause = and_(clause, using_clause(self.table, operation, self.uid))
        return self.db.query(self.model).filter(clause)

    def get(self, row_id) -> Optional[Any]:
        return self.query().filter(self.model.id == row_id).first()

    def insert(self, row):
        enforce_check(self.table, Operation.INSERT, self.uid, row)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def update(self, row_id, changes: Dict[str, Any]) -> Optional[Any]:
        """Apply ``changes`` to a row; None when the row is not visible for update."""
        row = self.query(Operation.UPDATE).filter(self.model.id == row_id).first()
        if row is None:
            return None

        for key, value in changes.items():
            setattr(row, key, value)

        try:
            enforce_check(self.table, Operation.UPDATE, self.uid, row)
        except PolicyViolation:
            self.db.rollback()
            raise

        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, row_id) -> bool:
        row = self.query(Operation.DELETE).filter(self.model.id == row_id).first()
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
