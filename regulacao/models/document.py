from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

DOCUMENT_TYPES = (
    "PEDIDO_MEDICO",
    "LAUDO_EXAME",
    "DOCUMENTO_CIDADAO",
    "OUTROS",
)

class RegulationDocument(db.Model):
    __tablename__ = "regulation_documents"

    id = db.Column(db.Integer, primary_key=True)
    regulation_id = db.Column(db.Integer, db.ForeignKey("regulations.id"), nullable=False, index=True)

    document_type = db.Column(db.String(30), nullable=False)  # PEDIDO_MEDICO/LAUDO_EXAME/...
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    # enviado por usuário logado ou por link de lista
    uploaded_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    list_batch_id = db.Column(db.Integer, db.ForeignKey("list_batches.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
