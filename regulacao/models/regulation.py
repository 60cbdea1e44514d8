from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

# enum do banco (regulação)
REGULATION_STATUS = (
    "IN_PROGRESS",   # em análise
    "SCHEDULED",     # agendado
    "APPROVED",      # aprovado/realizado
    "DENIED",        # negado
    "RETURNED",      # devolvido
    "CANCELLED",     # cancelado
)

PRIORITY_CHOICES = ("ELECTIVE", "PRIORITY", "URGENCY", "EMERGENCY")

regulation_cares = db.Table(
    "regulation_cares",
    db.Column("regulation_id", db.Integer, db.ForeignKey("regulations.id"), primary_key=True),
    db.Column("care_id", db.Integer, db.ForeignKey("cares.id"), primary_key=True),
)

class Care(db.Model):
    """Procedimento/exame/consulta regulável."""
    __tablename__ = "cares"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)
    name = db.Column(db.String(160), nullable=False)
    sigtap_code = db.Column(db.String(20), nullable=True)

class Regulation(db.Model):
    __tablename__ = "regulations"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)
    citizen_id = db.Column(db.Integer, db.ForeignKey("citizens.id"), nullable=False, index=True)
    citizen = db.relationship("Citizen")

    protocol_number = db.Column(db.String(40), nullable=True, index=True)
    status = db.Column(db.String(20), default="IN_PROGRESS", nullable=False, index=True)
    priority = db.Column(db.String(20), default="ELECTIVE", nullable=False)
    notes = db.Column(db.Text, nullable=True)

    cares = db.relationship("Care", secondary=regulation_cares, order_by="Care.name")

    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # exclusão lógica
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    __table_args__ = (
        db.CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in REGULATION_STATUS),
            name="ck_regulation_status",
        ),
        db.CheckConstraint(
            "priority IN (%s)" % ", ".join(f"'{p}'" for p in PRIORITY_CHOICES),
            name="ck_regulation_priority",
        ),
    )

    def __repr__(self) -> str:
        return f"<Regulation {self.id} {self.status}>"
