from datetime import datetime
from shift_api.extensions import db


class Employee(db.Model):
    __tablename__ = "employees"

    id            = db.Column(db.Integer, primary_key=True)
    employee_code = db.Column(db.String(32), unique=True, index=True, nullable=False)
    name          = db.Column(db.String(120), nullable=False)
    email         = db.Column(db.String(255), nullable=True)
    phone         = db.Column(db.String(20), nullable=True)
    department    = db.Column(db.String(80), nullable=True)
    position      = db.Column(db.String(80), nullable=True)
    hire_date     = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = db.relationship("ShiftAssignment", back_populates="employee", lazy="dynamic")

    __table_args__ = (
        db.Index("ix_emp_name", "name"),
    )
