"""
Persistence calls used by the assignment manager.

Reads return the record(s) or None / empty; absence is never an error here.
Writes commit immediately. IntegrityError is re-raised untouched so the caller
can classify it (it means a uniqueness or FK rule fired in the database);
any other SQLAlchemy failure is rolled back and surfaced as StorageError.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shift_api.common.errors import StorageError
from shift_api.extensions import db
from shift_api.models.employee import Employee
from shift_api.models.shift import Shift
from shift_api.models.shift_assignment import ShiftAssignment, STATUS_CANCELLED

log = logging.getLogger(__name__)


def _guarded(fn):
    @wraps(fn)
    def inner(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except IntegrityError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            log.exception("store call %s failed", fn.__name__)
            raise StorageError("Storage failure") from e
    return inner


class AssignmentStore:
    def __init__(self, session=None):
        self.session = session or db.session

    # ---------- reads ----------
    @_guarded
    def find_shift_by_id(self, shift_id: int, for_update: bool = False) -> Optional[Shift]:
        # FOR UPDATE serialises concurrent admissions on the same shift (ignored by sqlite)
        return self.session.get(Shift, shift_id, with_for_update=for_update or None)

    @_guarded
    def find_employee_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.session.get(Employee, employee_id)

    @_guarded
    def find_employees_by_ids(self, employee_ids: Iterable[int]) -> List[Employee]:
        ids = list(employee_ids)
        if not ids:
            return []
        return Employee.query.filter(Employee.id.in_(ids)).all()

    @_guarded
    def get_assignment(self, assignment_id: int) -> Optional[ShiftAssignment]:
        return self.session.get(ShiftAssignment, assignment_id)

    @_guarded
    def find_assignment(self, shift_id: int, employee_id: int) -> Optional[ShiftAssignment]:
        return ShiftAssignment.query.filter_by(shift_id=shift_id, employee_id=employee_id).first()

    @_guarded
    def find_assignments_for_pairs(self, shift_id: int, employee_ids: Iterable[int]) -> List[ShiftAssignment]:
        ids = list(employee_ids)
        if not ids:
            return []
        return (
            ShiftAssignment.query
            .filter(ShiftAssignment.shift_id == shift_id, ShiftAssignment.employee_id.in_(ids))
            .all()
        )

    @_guarded
    def count_assignments(
        self,
        shift_id: int | None = None,
        employee_id: int | None = None,
        exclude_cancelled: bool = False,
    ) -> int:
        q = self.session.query(func.count(ShiftAssignment.id))
        if shift_id is not None:
            q = q.filter(ShiftAssignment.shift_id == shift_id)
        if employee_id is not None:
            q = q.filter(ShiftAssignment.employee_id == employee_id)
        if exclude_cancelled:
            q = q.filter(ShiftAssignment.status != STATUS_CANCELLED)
        return int(q.scalar() or 0)

    @_guarded
    def count_by_shift(self, shift_ids: Iterable[int], exclude_cancelled: bool = True) -> dict[int, int]:
        ids = list(shift_ids)
        if not ids:
            return {}
        q = (
            self.session.query(ShiftAssignment.shift_id, func.count(ShiftAssignment.id))
            .filter(ShiftAssignment.shift_id.in_(ids))
        )
        if exclude_cancelled:
            q = q.filter(ShiftAssignment.status != STATUS_CANCELLED)
        counts = dict(q.group_by(ShiftAssignment.shift_id).all())
        return {sid: int(counts.get(sid, 0)) for sid in ids}

    # ---------- writes ----------
    @_guarded
    def insert_assignment(self, shift_id: int, employee_id: int, status: str) -> ShiftAssignment:
        a = ShiftAssignment(shift_id=shift_id, employee_id=employee_id, status=status)
        self.session.add(a)
        self.session.commit()
        return a

    @_guarded
    def insert_assignments_bulk(self, shift_id: int, employee_ids: Iterable[int], status: str) -> List[ShiftAssignment]:
        rows = [ShiftAssignment(shift_id=shift_id, employee_id=eid, status=status) for eid in employee_ids]
        # single commit: either every row lands or none does
        self.session.add_all(rows)
        self.session.commit()
        return rows

    @_guarded
    def update_assignment_status(self, assignment: ShiftAssignment, status: str) -> ShiftAssignment:
        assignment.status = status
        self.session.commit()
        return assignment

    @_guarded
    def delete_assignment(self, assignment: ShiftAssignment) -> None:
        self.session.delete(assignment)
        self.session.commit()

    @_guarded
    def delete_shift(self, shift: Shift) -> None:
        self.session.delete(shift)
        self.session.commit()

    @_guarded
    def delete_employee(self, employee: Employee) -> None:
        self.session.delete(employee)
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
