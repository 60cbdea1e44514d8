from flask import Blueprint, current_app, jsonify, render_template, request, url_for
from flask_login import login_required, current_user
from werkzeug.exceptions import RequestEntityTooLarge
from ...extensions import csrf
from ...utils.security import require_active
from .errors import ListError, InvalidInput
from .forms import ListUploadForm, DOCUMENT_TYPE_LABELS
from . import services

lists_api_bp = Blueprint("lists_api", __name__, url_prefix="/api/lists")
csrf.exempt(lists_api_bp)

lists_page_bp = Blueprint("lists_page", __name__)


def _link(batch) -> str:
    # só o caminho: o hash sozinho é o acesso
    return url_for("lists_page.public_list", list_hash=batch.hash, _external=True)


@lists_api_bp.errorhandler(ListError)
def handle_list_error(exc: ListError):
    current_app.logger.warning("%s %s -> %s (%s)", request.method, request.path[:24], exc.code, exc.message)
    return exc.to_response()


@lists_api_bp.errorhandler(RequestEntityTooLarge)
def handle_too_large(exc):
    return jsonify({"error": "file_too_large", "message": "Arquivo muito grande."}), 413


# --------------------------
# Gerência (usuário logado)
# --------------------------

@lists_api_bp.post("/generate")
@login_required
@require_active
def generate():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Corpo da requisição inválido.")

    batch = services.issue_list(
        current_user,
        item_ids=data.get("ids"),
        item_type=data.get("type"),
        batch_type=data.get("batchType"),
        expiry_hours=data.get("expiryHours"),
        access_limit=data.get("accessLimit"),
        allowed_actions=data.get("allowedActions"),
    )
    payload = services.serialize_summary(batch)
    payload.update({
        "link": _link(batch),
        "allowedActions": sorted(batch.action_set),
        "subscriberName": batch.subscriber_name,
        "itemIds": batch.item_ids,
    })
    return jsonify(payload), 201


@lists_api_bp.get("")
@login_required
@require_active
def index():
    items = []
    for batch in services.lists_for(current_user):
        row = services.serialize_summary(batch)
        row["link"] = _link(batch)
        items.append(row)
    return jsonify({"data": items})


@lists_api_bp.delete("/<list_hash>")
@login_required
@require_active
def revoke(list_hash: str):
    services.revoke_list(current_user, list_hash)
    return jsonify({"ok": True, "message": "Lista excluída com sucesso"})


# --------------------------
# Link (sem login)
# --------------------------

@lists_api_bp.get("/<list_hash>")
def show(list_hash: str):
    batch = services.check_access(list_hash)
    return jsonify({
        "batch": services.serialize_batch(batch),
        "itemType": batch.item_type,
        "items": services.project_items(batch),
    })


@lists_api_bp.patch("/<list_hash>")
def update(list_hash: str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        services.check_access(list_hash)
        raise InvalidInput("Corpo da requisição inválido.")
    return jsonify(services.apply_update(list_hash, data))


@lists_api_bp.post("/<list_hash>/upload")
def upload(list_hash: str):
    # link vencido responde como vencido, mesmo com formulário ruim
    services.check_access(list_hash)

    form = ListUploadForm()
    if not form.validate_on_submit():
        field = next(iter(form.errors), "")
        raise InvalidInput(f"Dados do envio inválidos ({field}).")

    result = services.apply(
        list_hash,
        form.itemId.data,
        "UPLOAD_REGULATION",
        {
            "file": form.file.data,
            "documentType": form.documentType.data,
            "notes": form.notes.data,
        },
    )
    return jsonify({"ok": True, **result}), 201


# --------------------------
# Página do celular
# --------------------------

@lists_page_bp.get("/list/<list_hash>")
def public_list(list_hash: str):
    return render_template(
        "lists/public.html",
        list_hash=list_hash,
        document_types=DOCUMENT_TYPE_LABELS,
        status_options=services.LIST_STATUS_OPTIONS,
    )
