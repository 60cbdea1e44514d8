from __future__ import annotations
from ..extensions import db
from ..utils.dates import utcnow

ITEM_TYPES = ("REGULATION", "SCHEDULE")

# Objetivo da lista
BATCH_TYPES = (
    "STATUS_UPDATE",        # aprovar/cancelar em massa pelo celular
    "DOCUMENT_UPLOAD",      # fotos de pedidos/laudos
    "SUPPLIER_VIEW",        # lista para fornecedor, CPF mascarado, só leitura
    "SCHEDULE_AND_STATUS",  # agendamento + status ao mesmo tempo
)

# nomes antigos usados pelo front
BATCH_TYPE_ALIASES = {
    "STATUS": "STATUS_UPDATE",
    "UPLOAD": "DOCUMENT_UPLOAD",
    "SUPPLIER_LIST": "SUPPLIER_VIEW",
    "SCHEDULE_LIST": "SCHEDULE_AND_STATUS",
}

LIST_ACTIONS = ("STATUS", "UPLOAD_REGULATION", "SCHEDULE")

BATCH_ACTIONS = {
    "STATUS_UPDATE": frozenset({"STATUS"}),
    "DOCUMENT_UPLOAD": frozenset({"UPLOAD_REGULATION"}),
    "SUPPLIER_VIEW": frozenset(),
    "SCHEDULE_AND_STATUS": frozenset({"STATUS", "SCHEDULE"}),
}

EXPIRY_HOURS_CHOICES = (1, 2, 4, 8, 12)
MAX_ACCESS_LIMIT = 5


class ListBatch(db.Model):
    """
    Link temporário (lista) para atualizar registros pelo celular.
    O hash é o próprio token de acesso; o id interno nunca sai daqui.
    """
    __tablename__ = "list_batches"

    id = db.Column(db.Integer, primary_key=True)
    hash = db.Column(db.String(64), unique=True, nullable=False, index=True)

    item_type = db.Column(db.String(20), nullable=False)
    batch_type = db.Column(db.String(30), nullable=False)
    allowed_actions = db.Column(db.String(80), default="", nullable=False)  # "STATUS,SCHEDULE"

    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    access_limit = db.Column(db.Integer, nullable=False)
    access_count = db.Column(db.Integer, default=0, nullable=False)

    subscriber_id = db.Column(db.Integer, db.ForeignKey("subscribers.id"), nullable=False, index=True)
    subscriber_name = db.Column(db.String(160), nullable=False)

    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # excluída pela gerência: link para de funcionar, registro fica para auditoria
    revoked_at = db.Column(db.DateTime, nullable=True)

    items = db.relationship(
        "ListBatchItem",
        order_by="ListBatchItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        db.CheckConstraint("access_count >= 0", name="ck_list_access_count_positive"),
        db.CheckConstraint("access_count <= access_limit", name="ck_list_access_count_limit"),
    )

    @property
    def item_ids(self) -> list[int]:
        return [i.item_id for i in self.items]

    @property
    def action_set(self) -> frozenset[str]:
        return frozenset(a for a in (self.allowed_actions or "").split(",") if a)

    def state(self, now=None) -> str:
        now = now or utcnow()
        if self.revoked_at is not None:
            return "revoked"
        if now >= self.expires_at:
            return "expired"
        if self.access_count >= self.access_limit:
            return "exhausted"
        return "active"

    def __repr__(self) -> str:
        return f"<ListBatch {self.id} {self.batch_type} {self.access_count}/{self.access_limit}>"


class ListBatchItem(db.Model):
    __tablename__ = "list_batch_items"

    id = db.Column(db.Integer, primary_key=True)
    batch_id = db.Column(db.Integer, db.ForeignKey("list_batches.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, nullable=False)

    # ordem definida por quem gerou (ex.: rota do motorista)
    position = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("batch_id", "item_id", name="uq_list_batch_item"),
    )
