from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

# quem fez a alteração quando não há usuário logado
BATCH_LINK_ACTOR = "batch-link"

class RecordEvent(db.Model):
    """Histórico de alterações de regulações e agendamentos."""
    __tablename__ = "record_events"

    id = db.Column(db.Integer, primary_key=True)
    item_type = db.Column(db.String(20), nullable=False, index=True)  # REGULATION / SCHEDULE
    item_id = db.Column(db.Integer, nullable=False, index=True)

    event_type = db.Column(db.String(30), nullable=False)  # status_changed, scheduled, notes, document_uploaded
    old_value = db.Column(db.String(40), nullable=True)
    new_value = db.Column(db.String(40), nullable=True)
    note = db.Column(db.Text, nullable=True)

    actor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    actor_label = db.Column(db.String(40), nullable=True)
    list_batch_id = db.Column(db.Integer, db.ForeignKey("list_batches.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
