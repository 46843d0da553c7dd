from datetime import datetime
from shift_api.extensions import db


class Shift(db.Model):
    __tablename__ = "shifts"

    id            = db.Column(db.Integer, primary_key=True)
    name          = db.Column(db.String(100), nullable=False)
    date          = db.Column(db.Date, nullable=False)
    start_time    = db.Column(db.Time, nullable=False)
    end_time      = db.Column(db.Time, nullable=False)   # may be earlier than start_time (overnight)
    location      = db.Column(db.String(200), nullable=True)
    description   = db.Column(db.String(500), nullable=True)
    max_employees = db.Column(db.Integer, nullable=True)  # null = no cap

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = db.relationship("ShiftAssignment", back_populates="shift", lazy="dynamic")

    __table_args__ = (
        db.CheckConstraint("max_employees IS NULL OR max_employees >= 1", name="ck_shift_max_employees"),
        db.Index("ix_shift_date_start", "date", "start_time"),
    )
