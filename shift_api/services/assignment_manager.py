"""
Rules for linking employees to shifts.

Invariants held here:
  * at most one assignment row per (shift, employee), whatever its status;
    the unique constraint on shift_assignments backs the existence check.
  * non-cancelled rows for a shift never exceed shift.max_employees (when set)
    right after an admission returns. The shift row is read FOR UPDATE while
    admitting so two admissions on one shift cannot both pass the count.
  * a shift (or employee) is only deleted once no assignment of any status
    references it. Capacity ignores cancelled rows; deletion does not.

Fullness is always counted live; nothing is cached on the shift.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy.exc import IntegrityError

from shift_api.common.auth import AuthContext
from shift_api.common.errors import (
    APIError, ValidationError, NotFound, Conflict, CapacityExceeded,
)
from shift_api.models.shift import Shift
from shift_api.models.shift_assignment import ShiftAssignment, STATUSES, STATUS_ASSIGNED
from shift_api.services.assignment_store import AssignmentStore

log = logging.getLogger(__name__)


def _who(actor: AuthContext | None) -> str:
    return actor.username if actor else "system"


def validate_status(status) -> str:
    s = (status or "").strip().lower() if isinstance(status, str) else status
    if s not in STATUSES:
        raise ValidationError(
            f"status must be one of {', '.join(STATUSES)}",
            payload={"status": status},
        )
    return s


class AssignmentManager:
    def __init__(self, store: AssignmentStore | None = None):
        self.store = store or AssignmentStore()

    def _reject(self, exc: APIError, actor: AuthContext | None):
        # drops the FOR UPDATE lock taken while checking
        self.store.rollback()
        log.info("rejected by=%s code=%s: %s", _who(actor), exc.code, exc.message)
        raise exc

    # ---------- reads ----------
    def assigned_count(self, shift_id: int) -> int:
        return self.store.count_assignments(shift_id=shift_id, exclude_cancelled=True)

    def assigned_counts(self, shift_ids: Iterable[int]) -> dict[int, int]:
        return self.store.count_by_shift(shift_ids, exclude_cancelled=True)

    def is_full(self, shift: Shift) -> bool:
        if shift.max_employees is None:
            return False
        return self.assigned_count(shift.id) >= shift.max_employees

    # ---------- create ----------
    def create_assignment(
        self,
        shift_id: int,
        employee_id: int,
        status: str = STATUS_ASSIGNED,
        actor: AuthContext | None = None,
    ) -> ShiftAssignment:
        status = validate_status(status)

        shift = self.store.find_shift_by_id(shift_id, for_update=True)
        if shift is None:
            self._reject(NotFound("Shift not found", code="SHIFT_NOT_FOUND"), actor)
        employee = self.store.find_employee_by_id(employee_id)
        if employee is None:
            self._reject(NotFound("Employee not found", code="EMPLOYEE_NOT_FOUND"), actor)

        if self.store.find_assignment(shift_id, employee_id) is not None:
            self._reject(Conflict(
                "Employee is already assigned to this shift",
                code="ASSIGNMENT_CONFLICT",
                payload={"shift_id": shift_id, "employee_id": employee_id},
            ), actor)

        if shift.max_employees is not None:
            current = self.assigned_count(shift_id)
            if current >= shift.max_employees:
                self._reject(CapacityExceeded(
                    "Shift is already full",
                    payload={"max_employees": shift.max_employees, "assigned": current},
                ), actor)

        try:
            a = self.store.insert_assignment(shift_id, employee_id, status)
        except IntegrityError:
            # lost a race against an identical insert
            raise self._conflict_after_race(shift_id, [employee_id], actor)

        log.info(
            "assignment created id=%s shift=%s employee=%s status=%s by=%s",
            a.id, shift_id, employee_id, status, _who(actor),
        )
        return a

    def create_assignments_bulk(
        self,
        shift_id: int,
        employee_ids: Iterable[int],
        actor: AuthContext | None = None,
    ) -> List[ShiftAssignment]:
        ids = list(employee_ids or [])
        if not ids:
            raise ValidationError("employee_ids must be a non-empty list")
        if len(set(ids)) != len(ids):
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            raise ValidationError("employee_ids must not contain duplicates", payload={"duplicates": dupes})

        shift = self.store.find_shift_by_id(shift_id, for_update=True)
        if shift is None:
            self._reject(NotFound("Shift not found", code="SHIFT_NOT_FOUND"), actor)

        found = self.store.find_employees_by_ids(ids)
        if len(found) != len(ids):
            known = {e.id for e in found}
            missing = [i for i in ids if i not in known]
            self._reject(NotFound(
                "One or more employees not found",
                code="EMPLOYEE_NOT_FOUND",
                payload={"missing_employee_ids": missing},
            ), actor)

        if shift.max_employees is not None:
            current = self.assigned_count(shift_id)
            if current + len(ids) > shift.max_employees:
                self._reject(CapacityExceeded(
                    "Cannot assign all employees - shift would exceed maximum capacity",
                    payload={
                        "max_employees": shift.max_employees,
                        "assigned": current,
                        "requested": len(ids),
                    },
                ), actor)

        existing = self.store.find_assignments_for_pairs(shift_id, ids)
        if existing:
            self._reject(Conflict(
                "Some employees are already assigned to this shift",
                code="ASSIGNMENT_CONFLICT",
                payload={"employee_ids": sorted(a.employee_id for a in existing)},
            ), actor)

        try:
            rows = self.store.insert_assignments_bulk(shift_id, ids, STATUS_ASSIGNED)
        except IntegrityError:
            raise self._conflict_after_race(shift_id, ids, actor)

        log.info(
            "bulk assignment shift=%s employees=%s by=%s",
            shift_id, ids, _who(actor),
        )
        return rows

    def _conflict_after_race(self, shift_id: int, employee_ids: List[int], actor) -> Conflict:
        exc = Conflict(
            "Employee is already assigned to this shift",
            code="ASSIGNMENT_CONFLICT",
            payload={"shift_id": shift_id, "employee_ids": employee_ids},
        )
        log.info("rejected by=%s code=%s: unique constraint fired", _who(actor), exc.code)
        return exc

    # ---------- update / delete ----------
    def _get_assignment(self, assignment_id: int) -> ShiftAssignment:
        a = self.store.get_assignment(assignment_id)
        if a is None:
            raise NotFound("Assignment not found", code="ASSIGNMENT_NOT_FOUND")
        return a

    def update_assignment_status(
        self,
        assignment_id: int,
        status: str,
        actor: AuthContext | None = None,
    ) -> ShiftAssignment:
        status = validate_status(status)
        a = self._get_assignment(assignment_id)
        previous = a.status
        a = self.store.update_assignment_status(a, status)
        log.info(
            "assignment %s status %s -> %s by=%s",
            assignment_id, previous, status, _who(actor),
        )
        return a

    def delete_assignment(self, assignment_id: int, actor: AuthContext | None = None) -> None:
        a = self._get_assignment(assignment_id)
        self.store.delete_assignment(a)
        log.info("assignment %s deleted by=%s", assignment_id, _who(actor))

    def delete_shift(self, shift_id: int, actor: AuthContext | None = None) -> None:
        shift = self.store.find_shift_by_id(shift_id)
        if shift is None:
            raise NotFound("Shift not found", code="SHIFT_NOT_FOUND")
        refs = self.store.count_assignments(shift_id=shift_id)
        if refs:
            self._reject(Conflict(
                "Cannot delete shift with existing assignments",
                code="SHIFT_IN_USE",
                payload={"assignments": refs},
            ), actor)
        self.store.delete_shift(shift)
        log.info("shift %s deleted by=%s", shift_id, _who(actor))

    def delete_employee(self, employee_id: int, actor: AuthContext | None = None) -> None:
        employee = self.store.find_employee_by_id(employee_id)
        if employee is None:
            raise NotFound("Employee not found", code="EMPLOYEE_NOT_FOUND")
        refs = self.store.count_assignments(employee_id=employee_id)
        if refs:
            self._reject(Conflict(
                "Cannot delete employee with existing assignments",
                code="EMPLOYEE_IN_USE",
                payload={"assignments": refs},
            ), actor)
        self.store.delete_employee(employee)
        log.info("employee %s deleted by=%s", employee_id, _who(actor))
