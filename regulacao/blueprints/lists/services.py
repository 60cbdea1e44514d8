"""
Listas: links temporários (hash) para atualizar regulações/agendamentos em lote
pelo celular, sem login.

Fluxo: issue_list -> check_access -> project_items -> apply (uma vez por ação).
O hash é o token; cada ação bem-sucedida consome exatamente um acesso.
"""
from __future__ import annotations

import secrets
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...models import (
    Subscriber, Regulation, Schedule, RegulationDocument, RecordEvent,
    ListBatch, ListBatchItem,
)
from ...models.document import DOCUMENT_TYPES
from ...models.list_batch import (
    ITEM_TYPES, BATCH_TYPES, BATCH_TYPE_ALIASES, BATCH_ACTIONS, LIST_ACTIONS,
    EXPIRY_HOURS_CHOICES, MAX_ACCESS_LIMIT,
)
from ...models.record_event import BATCH_LINK_ACTOR
from ...models.schedule import OPEN_SCHEDULE_STATUS
from ...utils.dates import utcnow, isoformat, parse_iso_datetime
from ...utils.masking import mask_cpf, mask_cns, format_cpf
from ...utils.uploads import document_ext, save_document, remove_document
from .errors import (
    ListError, InvalidInput, Unauthorized, NotFound, Expired, Exhausted,
    ItemNotInBatch, ActionNotAllowed, UploadFailed,
)

# status que o celular pode aplicar, por tipo de item
LIST_STATUS_OPTIONS = {
    "REGULATION": ("APPROVED", "DENIED"),
    "SCHEDULE": ("CONFIRMED", "COMPLETED", "CANCELLED", "NO_SHOW"),
}

NOTES_MAX_LENGTH = 2000

_MODELS = {"REGULATION": Regulation, "SCHEDULE": Schedule}


# --------------------------
# Emissão
# --------------------------

def normalize_batch_type(raw) -> str:
    value = str(raw or "").strip().upper()
    value = BATCH_TYPE_ALIASES.get(value, value)
    if value not in BATCH_TYPES:
        raise InvalidInput("Objetivo da lista inválido.")
    return value


def _parse_int(value, message: str) -> int:
    # só inteiro de verdade ou texto só com dígitos; 1.9 não vira 1
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    raise InvalidInput(message)


def _parse_ids(raw) -> list[int]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise InvalidInput("Selecione ao menos um registro.")

    ids: list[int] = []
    seen = set()
    for value in raw:
        item_id = _parse_int(value, "Lista de registros inválida.")
        if item_id <= 0:
            raise InvalidInput("Lista de registros inválida.")
        if item_id in seen:
            continue
        seen.add(item_id)
        ids.append(item_id)

    max_items = current_app.config.get("LIST_MAX_ITEMS", 200)
    if len(ids) > max_items:
        raise InvalidInput(f"Máximo de {max_items} registros por lista.")
    return ids


def _generate_hash() -> str:
    for _ in range(5):
        candidate = secrets.token_urlsafe(32)
        if not ListBatch.query.filter_by(hash=candidate).first():
            return candidate
    raise RuntimeError("Não foi possível gerar um hash único para a lista")


def issue_list(user, item_ids, item_type, batch_type, expiry_hours, access_limit,
               allowed_actions=None, now=None) -> ListBatch:
    """Gera a lista (hash) para os registros selecionados pelo usuário logado."""
    now = now or utcnow()

    item_type = str(item_type or "").strip().upper()
    if item_type not in ITEM_TYPES:
        raise InvalidInput("Tipo de registro inválido.")

    batch_type = normalize_batch_type(batch_type)
    ids = _parse_ids(item_ids)

    expiry_hours = _parse_int(expiry_hours, "Tempo de expiração inválido.")
    if expiry_hours not in EXPIRY_HOURS_CHOICES:
        raise InvalidInput("Tempo de expiração inválido.")

    access_limit = _parse_int(access_limit, "Limite de acessos inválido.")
    if access_limit < 1 or access_limit > MAX_ACCESS_LIMIT:
        raise InvalidInput(f"Limite de acessos deve ser entre 1 e {MAX_ACCESS_LIMIT}.")

    actions = BATCH_ACTIONS[batch_type]
    if allowed_actions is not None:
        if not isinstance(allowed_actions, (list, tuple)):
            raise InvalidInput("Ações permitidas inválidas.")
        requested = {str(a).strip().upper() for a in allowed_actions}
        if requested != actions:
            raise InvalidInput("Ações permitidas não correspondem ao objetivo da lista.")

    model = _MODELS[item_type]
    rows = model.query.filter(model.id.in_(ids), model.deleted_at.is_(None)).all()

    # id inexistente e id de outro município dão o mesmo erro
    if len(rows) != len(ids):
        raise Unauthorized()
    subscriber_ids = {r.subscriber_id for r in rows}
    if not all(user.can_see_subscriber(sid) for sid in subscriber_ids):
        raise Unauthorized()
    if len(subscriber_ids) != 1:
        raise InvalidInput("Todos os registros devem ser do mesmo município.")

    subscriber = db.session.get(Subscriber, subscriber_ids.pop())

    batch = ListBatch(
        hash=_generate_hash(),
        item_type=item_type,
        batch_type=batch_type,
        allowed_actions=",".join(sorted(actions)),
        expires_at=now + timedelta(hours=expiry_hours),
        access_limit=access_limit,
        access_count=0,
        subscriber_id=subscriber.id,
        subscriber_name=subscriber.name,
        created_by_id=user.id,
        created_at=now,
    )
    batch.items = [ListBatchItem(item_id=item_id, position=pos) for pos, item_id in enumerate(ids)]

    try:
        db.session.add(batch)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Falha ao gravar lista")
        raise

    current_app.logger.info(
        "Lista %s gerada por %s: %s %s, %d itens, %dh, %d acessos",
        batch.id, user.id, batch.batch_type, batch.item_type, len(ids), expiry_hours, access_limit,
    )
    return batch


# --------------------------
# Validade do link
# --------------------------

def _raise_for_state(batch: ListBatch, now) -> None:
    state = batch.state(now)
    if state == "revoked":
        raise NotFound()
    if state == "expired":
        raise Expired()
    if state == "exhausted":
        raise Exhausted()


def check_access(hash_: str, now=None) -> ListBatch:
    """Somente leitura: devolve a lista se o link ainda pode ser usado."""
    now = now or utcnow()
    hash_ = (hash_ or "").strip()
    batch = ListBatch.query.filter_by(hash=hash_).first() if hash_ else None
    if batch is None:
        raise NotFound()
    _raise_for_state(batch, now)
    return batch


def _consume_access(batch: ListBatch, now) -> None:
    # compare-and-increment em um único UPDATE; nunca ler e depois gravar
    updated = (
        ListBatch.query
        .filter(
            ListBatch.id == batch.id,
            ListBatch.revoked_at.is_(None),
            ListBatch.expires_at > now,
            ListBatch.access_count < ListBatch.access_limit,
        )
        .update({ListBatch.access_count: ListBatch.access_count + 1}, synchronize_session=False)
    )
    if updated != 1:
        db.session.refresh(batch)
        _raise_for_state(batch, now)
        raise Exhausted()


# --------------------------
# Itens
# --------------------------

def _serialize_citizen(citizen, supplier: bool) -> dict | None:
    if citizen is None:
        return None
    if supplier:
        return {
            "name": citizen.name,
            "cpf": mask_cpf(citizen.cpf),
            "cns": mask_cns(citizen.cns),
            "age": citizen.age,
        }
    return {
        "name": citizen.name,
        "cpf": format_cpf(citizen.cpf),
        "cns": citizen.cns,
        "age": citizen.age,
        "birthDate": isoformat(citizen.birth_date),
    }


def serialize_item(record, item_type: str, supplier: bool = False) -> dict:
    data = {
        "id": record.id,
        "status": record.status,
        "notes": None if supplier else record.notes,
        "createdAt": isoformat(record.created_at),
        "citizen": _serialize_citizen(record.citizen, supplier),
    }
    if item_type == "REGULATION":
        data["cares"] = [c.name for c in record.cares]
        data["priority"] = record.priority
        data["protocolNumber"] = record.protocol_number
    else:
        prof = record.professional
        data["scheduledDate"] = isoformat(record.scheduled_date)
        data["professional"] = {"name": prof.name, "specialty": prof.specialty} if prof else None
        data["regulationId"] = record.regulation_id
    return data


def project_items(batch: ListBatch) -> list[dict]:
    """Itens da lista na ordem em que foram selecionados; excluídos somem."""
    ids = batch.item_ids
    if not ids:
        return []

    model = _MODELS[batch.item_type]
    rows = model.query.filter(model.id.in_(ids), model.deleted_at.is_(None)).all()
    by_id = {r.id: r for r in rows}

    supplier = batch.batch_type == "SUPPLIER_VIEW"
    return [serialize_item(by_id[i], batch.item_type, supplier) for i in ids if i in by_id]


def serialize_batch(batch: ListBatch) -> dict:
    return {
        "uuid": batch.hash,
        "type": batch.batch_type,
        "itemType": batch.item_type,
        "expiresAt": isoformat(batch.expires_at),
        "allowedActions": sorted(batch.action_set),
        "subscriberName": batch.subscriber_name,
        "accessCount": batch.access_count,
        "accessLimit": batch.access_limit,
    }


def serialize_summary(batch: ListBatch, now=None) -> dict:
    return {
        "id": batch.id,
        "hash": batch.hash,
        "type": batch.batch_type,
        "itemType": batch.item_type,
        "expiresAt": isoformat(batch.expires_at),
        "createdAt": isoformat(batch.created_at),
        "accessCount": batch.access_count,
        "accessLimit": batch.access_limit,
        "itemCount": len(batch.items),
        "state": batch.state(now),
    }


# --------------------------
# Alterações via link
# --------------------------

def _clean_notes(raw) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidInput("Observação inválida.")
    notes = raw.strip()
    if len(notes) > NOTES_MAX_LENGTH:
        raise InvalidInput(f"Observação muito longa (máx. {NOTES_MAX_LENGTH} caracteres).")
    return notes or None


def _clean_status(raw, item_type: str) -> str | None:
    if raw in (None, ""):
        return None
    status = str(raw).strip().upper()
    if status not in LIST_STATUS_OPTIONS[item_type]:
        raise InvalidInput("Status inválido para esta lista.")
    return status


def _event(batch, item_type, item_id, event_type, old=None, new=None, note=None):
    db.session.add(RecordEvent(
        item_type=item_type,
        item_id=item_id,
        event_type=event_type,
        old_value=old,
        new_value=new,
        note=note,
        actor_id=None,
        actor_label=BATCH_LINK_ACTOR,
        list_batch_id=batch.id,
    ))


def _prepare_status(batch, record, payload):
    status = _clean_status(payload.get("status"), batch.item_type)
    notes = _clean_notes(payload.get("notes"))
    if status is None and notes is None:
        raise InvalidInput("Informe o novo status ou uma observação.")
    return {"status": status, "notes": notes}


def _apply_status(batch, record, data, now):
    status, notes = data["status"], data["notes"]
    if status and status != record.status:
        _event(batch, batch.item_type, record.id, "status_changed", record.status, status, notes)
        record.status = status
    elif notes:
        _event(batch, batch.item_type, record.id, "notes", note=notes)
    if notes:
        record.notes = notes
    return serialize_item(record, batch.item_type)


def _prepare_schedule(batch, record, payload):
    raw = payload.get("scheduledDate")
    if not raw or not isinstance(raw, str):
        raise InvalidInput("Informe a data do agendamento.")
    try:
        # o celular manda UTC; hora sem fuso seria a hora local do aparelho
        scheduled_date = parse_iso_datetime(raw, require_offset=True)
    except ValueError:
        raise InvalidInput("Data do agendamento inválida (informe o fuso horário).") from None
    return {
        "scheduled_date": scheduled_date,
        "status": _clean_status(payload.get("status"), batch.item_type),
        "notes": _clean_notes(payload.get("notes")),
    }


def _apply_schedule(batch, record, data, now):
    when, status, notes = data["scheduled_date"], data["status"], data["notes"]

    if batch.item_type == "SCHEDULE":
        schedule = record
    else:
        schedule = (
            record.schedules
            .filter(Schedule.deleted_at.is_(None), Schedule.status.in_(OPEN_SCHEDULE_STATUS))
            .order_by(Schedule.created_at.desc())
            .first()
        )
        if schedule is None:
            schedule = Schedule(
                subscriber_id=record.subscriber_id,
                regulation_id=record.id,
                citizen_id=record.citizen_id,
                status="SCHEDULED",
            )
            db.session.add(schedule)
            db.session.flush()
        # regulação agendada, a não ser que o status venha junto
        status = status or "SCHEDULED"

    old_date = isoformat(schedule.scheduled_date)
    schedule.scheduled_date = when
    _event(batch, "SCHEDULE", schedule.id, "scheduled", old_date, isoformat(when), notes)

    if status and status != record.status:
        _event(batch, batch.item_type, record.id, "status_changed", record.status, status, notes)
        record.status = status
    if notes:
        record.notes = notes
    return serialize_item(record, batch.item_type)


def _prepare_upload(batch, record, payload):
    file_storage = payload.get("file")
    if file_storage is None or not getattr(file_storage, "filename", ""):
        raise InvalidInput("Envie o arquivo do documento.")

    document_type = str(payload.get("documentType") or "").strip().upper()
    if document_type not in DOCUMENT_TYPES:
        raise InvalidInput("Tipo de documento inválido.")

    regulation = record if batch.item_type == "REGULATION" else record.regulation
    if regulation is None or regulation.deleted_at is not None:
        raise InvalidInput("Agendamento sem regulação vinculada.")

    # extensão validada antes de consumir o acesso
    if not document_ext(file_storage.filename):
        raise InvalidInput("Tipo de arquivo não permitido.")

    return {
        "file": file_storage,
        "document_type": document_type,
        "notes": _clean_notes(payload.get("notes")),
        "regulation": regulation,
    }


def _apply_upload(batch, record, data, now):
    regulation = data["regulation"]
    try:
        stored, original = save_document(data["file"], regulation.id)
    except (OSError, ValueError):
        current_app.logger.exception("Falha ao salvar documento da lista %s", batch.id)
        raise UploadFailed() from None

    doc = RegulationDocument(
        regulation_id=regulation.id,
        document_type=data["document_type"],
        filename=stored,
        original_name=original,
        notes=data["notes"],
        uploaded_by_id=None,
        list_batch_id=batch.id,
        created_at=now,
    )
    db.session.add(doc)
    _event(batch, "REGULATION", regulation.id, "document_uploaded", new=data["document_type"], note=data["notes"])
    # documento não muda o status do registro
    return {
        "document": {
            "documentType": doc.document_type,
            "originalName": original,
            "regulationId": regulation.id,
        },
        "_stored": (stored, regulation.id),
    }


_HANDLERS = {
    "STATUS": (_prepare_status, _apply_status),
    "SCHEDULE": (_prepare_schedule, _apply_schedule),
    "UPLOAD_REGULATION": (_prepare_upload, _apply_upload),
}


def apply(hash_: str, item_id, action: str, payload: dict, now=None) -> dict:
    """
    Aplica uma ação (STATUS, SCHEDULE ou UPLOAD_REGULATION) em um item da lista.

    Ordem: validade do link, item pertence à lista, ação permitida, payload,
    consumo atômico de um acesso, alteração, commit. Qualquer falha desfaz
    tudo e o acesso não é consumido.
    """
    now = now or utcnow()
    batch = check_access(hash_, now)

    item_id = _parse_int(item_id, "Registro inválido.")
    if item_id not in batch.item_ids:
        raise ItemNotInBatch()

    action = str(action or "").strip().upper()
    if action not in LIST_ACTIONS:
        raise InvalidInput("Ação inválida.")
    required = {action}
    if action == "SCHEDULE" and payload.get("status"):
        required.add("STATUS")
    if not required <= batch.action_set:
        raise ActionNotAllowed()

    model = _MODELS[batch.item_type]
    record = db.session.get(model, item_id)
    if record is None or record.deleted_at is not None:
        # excluído depois da emissão; a lista do celular está velha
        raise ItemNotInBatch()

    prepare, handler = _HANDLERS[action]
    data = prepare(batch, record, payload)

    stored = None
    try:
        _consume_access(batch, now)
        result = handler(batch, record, data, now)
        stored = result.pop("_stored", None)
        db.session.commit()
    except ListError:
        db.session.rollback()
        raise
    except SQLAlchemyError:
        db.session.rollback()
        if stored:
            remove_document(*stored)
        current_app.logger.exception("Falha ao aplicar %s na lista %s", action, batch.id)
        raise

    current_app.logger.info(
        "Lista %s: %s no item %s (%d/%d)",
        batch.id, action, item_id, batch.access_count, batch.access_limit,
    )
    result["accessCount"] = batch.access_count
    result["accessLimit"] = batch.access_limit
    return result


def apply_update(hash_: str, payload: dict, now=None) -> dict:
    """PATCH do celular: {itemId, status?, notes?, scheduledDate?}."""
    if payload.get("scheduledDate"):
        action = "SCHEDULE"
    elif payload.get("status") or payload.get("notes"):
        action = "STATUS"
    else:
        # valida o link antes de reclamar do corpo
        check_access(hash_, now)
        raise InvalidInput("Nada para atualizar.")
    result = apply(hash_, payload.get("itemId"), action, payload, now=now)
    access_count = result.pop("accessCount")
    access_limit = result.pop("accessLimit")
    return {"item": result, "accessCount": access_count, "accessLimit": access_limit}


# --------------------------
# Gestão (usuário logado)
# --------------------------

def lists_for(user, limit: int = 100) -> list[ListBatch]:
    q = ListBatch.query
    if user.role == "admin":
        pass
    elif user.role == "manager":
        q = q.filter(ListBatch.subscriber_id == user.subscriber_id)
    else:
        q = q.filter(ListBatch.created_by_id == user.id)
    return q.order_by(ListBatch.created_at.desc(), ListBatch.id.desc()).limit(limit).all()


def revoke_list(user, hash_: str, now=None) -> ListBatch:
    now = now or utcnow()
    batch = ListBatch.query.filter_by(hash=(hash_ or "").strip()).first()
    if batch is None:
        raise NotFound()

    is_owner = batch.created_by_id == user.id
    is_manager = user.role == "manager" and user.subscriber_id == batch.subscriber_id
    if not (is_owner or is_manager or user.role == "admin"):
        raise Unauthorized("Você não pode excluir esta lista.")

    if batch.revoked_at is None:
        batch.revoked_at = now
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Falha ao excluir lista %s", batch.id)
            raise
        current_app.logger.info("Lista %s excluída por %s", batch.id, user.id)
    return batch
