from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

class Subscriber(db.Model):
    """Assinante do sistema: secretaria municipal de saúde."""
    __tablename__ = "subscribers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), unique=True, nullable=False, index=True)
    municipality = db.Column(db.String(120), nullable=True)
    active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Subscriber {self.name}>"
