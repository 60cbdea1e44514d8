from __future__ import annotations
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db
from ..utils.dates import utcnow

ROLE_CHOICES = ("operator", "regulator", "manager", "admin")

class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    # Matrícula/CPF do servidor (chave de login)
    matricula = db.Column(db.String(32), unique=True, nullable=False, index=True)

    nome = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(180), unique=True, nullable=True, index=True)

    # município/secretaria (tenant); admin do sistema pode não ter
    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=True, index=True)
    subscriber = db.relationship("Subscriber")

    password_hash = db.Column(db.String(255), nullable=False)

    # pending -> aguarda liberação, active -> liberado, blocked -> bloqueado
    status = db.Column(db.String(20), default="pending", nullable=False, index=True)

    # role: operator, regulator, manager, admin
    role = db.Column(db.String(20), default="operator", nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            "role IN (%s)" % ", ".join(f"'{r}'" for r in ROLE_CHOICES),
            name="ck_user_role",
        ),
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def can_see_subscriber(self, subscriber_id: int | None) -> bool:
        if self.role == "admin":
            return True
        return subscriber_id is not None and subscriber_id == self.subscriber_id

    def __repr__(self) -> str:
        return f"<User {self.matricula} {self.nome}>"
