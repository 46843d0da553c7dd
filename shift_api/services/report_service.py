import csv
import io
import logging
from datetime import datetime, timedelta

import openpyxl

from shift_api.common.errors import ValidationError
from shift_api.models.employee import Employee
from shift_api.models.shift import Shift
from shift_api.models.shift_assignment import (
    ShiftAssignment, STATUS_ASSIGNED, STATUS_COMPLETED, STATUS_CANCELLED,
)

log = logging.getLogger(__name__)

NA = "N/A"
FORMATS = {
    "csv": ("csv", "text/csv"),
    "xlsx": ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
}

ASSIGNMENT_HEADERS = [
    "Assignment ID", "Employee Name", "Employee ID", "Employee Email",
    "Employee Department", "Employee Position", "Shift Name", "Shift Date",
    "Start Time", "End Time", "Location", "Assignment Status",
    "Assigned At", "Updated At",
]
SHIFT_HEADERS = [
    "Shift ID", "Shift Name", "Date", "Start Time", "End Time", "Location",
    "Description", "Max Employees", "Total Assignments", "Assigned Count",
    "Completed Count", "Cancelled Count", "Created At", "Updated At",
]
EMPLOYEE_HEADERS = [
    "Employee ID", "Employee Name", "Email", "Phone", "Department", "Position",
    "Hire Date", "Total Assignments", "Assigned Count", "Completed Count",
    "Cancelled Count", "Recent Shifts", "Created At", "Updated At",
]


def _d(v):
    return v.isoformat() if v else NA


def _t(v):
    return v.strftime("%H:%M") if v else NA


def _dt(v):
    return v.strftime("%Y-%m-%d %H:%M:%S") if v else NA


def _s(v):
    return v if v not in (None, "") else NA


def _status_counts(assignments) -> dict:
    counts = {STATUS_ASSIGNED: 0, STATUS_COMPLETED: 0, STATUS_CANCELLED: 0}
    for a in assignments:
        counts[a.status] = counts.get(a.status, 0) + 1
    return counts


class ReportService:
    def __init__(self, window_days: int = 30, now: datetime | None = None):
        if window_days < 1:
            raise ValidationError("days must be >= 1")
        self.window_days = window_days
        self.now = now or datetime.utcnow()

    @property
    def since(self) -> datetime:
        return self.now - timedelta(days=self.window_days)

    # ---------- row builders ----------
    def assignment_rows(self) -> list[dict]:
        items = (
            ShiftAssignment.query
            .filter(ShiftAssignment.assigned_at >= self.since)
            .order_by(ShiftAssignment.assigned_at.desc(), ShiftAssignment.id.desc())
            .all()
        )
        rows = []
        for a in items:
            e, s = a.employee, a.shift
            rows.append({
                "Assignment ID": a.id,
                "Employee Name": _s(e.name if e else None),
                "Employee ID": _s(e.employee_code if e else None),
                "Employee Email": _s(e.email if e else None),
                "Employee Department": _s(e.department if e else None),
                "Employee Position": _s(e.position if e else None),
                "Shift Name": _s(s.name if s else None),
                "Shift Date": _d(s.date if s else None),
                "Start Time": _t(s.start_time if s else None),
                "End Time": _t(s.end_time if s else None),
                "Location": _s(s.location if s else None),
                "Assignment Status": a.status,
                "Assigned At": _dt(a.assigned_at),
                "Updated At": _dt(a.updated_at),
            })
        return rows

    def shift_rows(self) -> list[dict]:
        shifts = (
            Shift.query
            .filter(Shift.date >= self.since.date())
            .order_by(Shift.date.desc(), Shift.start_time.asc())
            .all()
        )
        rows = []
        for s in shifts:
            assignments = s.assignments.all()
            counts = _status_counts(assignments)
            rows.append({
                "Shift ID": s.id,
                "Shift Name": s.name,
                "Date": _d(s.date),
                "Start Time": _t(s.start_time),
                "End Time": _t(s.end_time),
                "Location": _s(s.location),
                "Description": _s(s.description),
                "Max Employees": s.max_employees if s.max_employees is not None else "No limit",
                "Total Assignments": len(assignments),
                "Assigned Count": counts[STATUS_ASSIGNED],
                "Completed Count": counts[STATUS_COMPLETED],
                "Cancelled Count": counts[STATUS_CANCELLED],
                "Created At": _dt(s.created_at),
                "Updated At": _dt(s.updated_at),
            })
        return rows

    def employee_rows(self) -> list[dict]:
        rows = []
        for e in Employee.query.order_by(Employee.name.asc()).all():
            recent = (
                e.assignments
                .filter(ShiftAssignment.assigned_at >= self.since)
                .order_by(ShiftAssignment.assigned_at.desc())
                .all()
            )
            counts = _status_counts(recent)
            recent_shifts = "; ".join(
                f"{a.shift.name} ({_d(a.shift.date)})" for a in recent[:3] if a.shift
            )
            rows.append({
                "Employee ID": e.employee_code,
                "Employee Name": e.name,
                "Email": _s(e.email),
                "Phone": _s(e.phone),
                "Department": _s(e.department),
                "Position": _s(e.position),
                "Hire Date": _d(e.hire_date),
                "Total Assignments": len(recent),
                "Assigned Count": counts[STATUS_ASSIGNED],
                "Completed Count": counts[STATUS_COMPLETED],
                "Cancelled Count": counts[STATUS_CANCELLED],
                "Recent Shifts": recent_shifts or "None",
                "Created At": _dt(e.created_at),
                "Updated At": _dt(e.updated_at),
            })
        return rows

    # ---------- output ----------
    def generate_file(self, rows: list[dict], headers: list[str], output_format: str, file_name_base: str) -> tuple[bytes, str, str]:
        """
        Returns (file_bytes, full_file_name, mime_type).
        Headers are always written, even for an empty report.
        """
        fmt = (output_format or "csv").lower()
        if fmt not in FORMATS:
            raise ValidationError(f"format must be one of {', '.join(FORMATS)}")
        ext, mime = FORMATS[fmt]

        if fmt == "csv":
            output = io.StringIO()
            writer = csv.DictWriter(output, fieldnames=headers)
            writer.writeheader()
            writer.writerows(rows)
            content = output.getvalue().encode("utf-8")
        else:
            output = io.BytesIO()
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = file_name_base[:31]
            ws.append(headers)
            for row in rows:
                ws.append([row.get(h) for h in headers])
            wb.save(output)
            content = output.getvalue()

        file_name = f"{file_name_base}_report_{self.now.date().isoformat()}.{ext}"
        log.info("report %s generated rows=%d", file_name, len(rows))
        return content, file_name, mime

    def build(self, kind: str, output_format: str = "csv") -> tuple[bytes, str, str]:
        if kind == "assignments":
            rows, headers = self.assignment_rows(), ASSIGNMENT_HEADERS
        elif kind == "shifts":
            rows, headers = self.shift_rows(), SHIFT_HEADERS
        elif kind == "employees":
            rows, headers = self.employee_rows(), EMPLOYEE_HEADERS
        else:
            raise ValidationError(f"Unknown report {kind!r}")
        return self.generate_file(rows, headers, output_format, kind)
