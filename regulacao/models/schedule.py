from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

SCHEDULE_STATUS = (
    "SCHEDULED",
    "CONFIRMED",
    "WAITING",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "NO_SHOW",
    "RESCHEDULED",
)

# agendamentos que ainda podem ser remarcados
OPEN_SCHEDULE_STATUS = ("SCHEDULED", "CONFIRMED", "WAITING", "RESCHEDULED")

class Schedule(db.Model):
    __tablename__ = "schedules"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)

    regulation_id = db.Column(db.Integer, db.ForeignKey("regulations.id"), nullable=True, index=True)
    regulation = db.relationship("Regulation", backref=db.backref("schedules", lazy="dynamic"))

    citizen_id = db.Column(db.Integer, db.ForeignKey("citizens.id"), nullable=False, index=True)
    citizen = db.relationship("Citizen")

    professional_id = db.Column(db.Integer, db.ForeignKey("professionals.id"), nullable=True)
    professional = db.relationship("Professional")

    scheduled_date = db.Column(db.DateTime, nullable=True, index=True)
    status = db.Column(db.String(20), default="SCHEDULED", nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    __table_args__ = (
        db.CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in SCHEDULE_STATUS),
            name="ck_schedule_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Schedule {self.id} {self.status}>"
