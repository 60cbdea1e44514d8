from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow, age_on

class Citizen(db.Model):
    __tablename__ = "citizens"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)

    name = db.Column(db.String(160), nullable=False)
    cpf = db.Column(db.String(14), nullable=True, index=True)   # só dígitos
    cns = db.Column(db.String(15), nullable=True, index=True)   # Cartão Nacional de Saúde
    birth_date = db.Column(db.Date, nullable=True)
    phone = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    @property
    def age(self) -> int | None:
        return age_on(self.birth_date)

    def __repr__(self) -> str:
        return f"<Citizen {self.id} {self.name}>"


class Professional(db.Model):
    __tablename__ = "professionals"

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)

    name = db.Column(db.String(160), nullable=False)
    specialty = db.Column(db.String(120), nullable=True)
    cns = db.Column(db.String(15), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
