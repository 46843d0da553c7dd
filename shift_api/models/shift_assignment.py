from datetime import datetime
from shift_api.extensions import db

STATUS_ASSIGNED = "assigned"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUSES = (STATUS_ASSIGNED, STATUS_COMPLETED, STATUS_CANCELLED)


class ShiftAssignment(db.Model):
    __tablename__ = "shift_assignments"

    id          = db.Column(db.Integer, primary_key=True)
    shift_id    = db.Column(db.Integer, db.ForeignKey("shifts.id", ondelete="RESTRICT"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)
    status      = db.Column(db.String(16), nullable=False, default=STATUS_ASSIGNED)

    assigned_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    shift    = db.relationship("Shift", back_populates="assignments", lazy="joined")
    employee = db.relationship("Employee", back_populates="assignments", lazy="joined")

    __table_args__ = (
        # one row per pair, whatever its status
        db.UniqueConstraint("shift_id", "employee_id", name="uq_shift_assignment_pair"),
        db.CheckConstraint("status IN ('assigned', 'completed', 'cancelled')", name="ck_shift_assignment_status"),
        db.Index("ix_sa_shift_status", "shift_id", "status"),
    )
