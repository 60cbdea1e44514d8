import os
import secrets
from werkzeug.utils import secure_filename
from flask import current_app

# fotos do celular + PDF escaneado
DOCUMENT_EXTS = {".pdf", ".png", ".jpg", ".jpeg", ".webp", ".heic"}


def document_ext(filename: str | None) -> str:
    """Extensão normalizada ('' se não for aceita)."""
    _, ext = os.path.splitext(secure_filename(filename or "").lower())
    return ext if ext in DOCUMENT_EXTS else ""


def document_dir(regulation_id: int) -> str:
    return os.path.join(current_app.config["UPLOAD_FOLDER"], "regulations", str(regulation_id))


def save_document(file_storage, regulation_id: int) -> tuple[str, str]:
    """Grava o documento da regulação; devolve (nome_gravado, nome_original)."""
    original = file_storage.filename or "documento"
    ext = document_ext(original)
    if not ext:
        raise ValueError(f"Tipo de arquivo não permitido: {original}")

    folder = document_dir(regulation_id)
    os.makedirs(folder, exist_ok=True)

    stored = f"{secrets.token_hex(8)}{ext}"
    file_storage.save(os.path.join(folder, stored))
    return stored, original


def remove_document(stored: str, regulation_id: int) -> None:
    path = os.path.join(document_dir(regulation_id), stored)
    if os.path.exists(path):
        os.remove(path)
