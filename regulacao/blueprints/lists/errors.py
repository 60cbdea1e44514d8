from __future__ import annotations
from flask import jsonify


class ListError(Exception):
    """Erro das listas; vira resposta JSON {error, message}."""

    status_code = 400
    code = "list_error"
    default_message = "Não foi possível processar a lista."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self):
        return jsonify({"error": self.code, "message": self.message}), self.status_code


class InvalidInput(ListError):
    status_code = 400
    code = "invalid_input"
    default_message = "Dados inválidos."


class Unauthorized(ListError):
    status_code = 403
    code = "unauthorized"
    default_message = "Você não tem acesso a todos os registros selecionados."


class NotFound(ListError):
    status_code = 404
    code = "not_found"
    default_message = "Link inválido ou removido."


class Expired(ListError):
    status_code = 410
    code = "expired"
    default_message = "Este link expirou. Solicite um novo à regulação."


class Exhausted(ListError):
    status_code = 410
    code = "exhausted"
    default_message = "Este link já atingiu o limite de acessos."


class ItemNotInBatch(ListError):
    # lista desatualizada no celular: o cliente deve recarregar
    status_code = 409
    code = "item_not_in_batch"
    default_message = "Este registro não faz parte da lista. Atualize a página."


class ActionNotAllowed(ListError):
    status_code = 409
    code = "action_not_allowed"
    default_message = "Esta lista não permite essa ação. Atualize a página."


class UploadFailed(ListError):
    status_code = 500
    code = "upload_failed"
    default_message = "Erro ao salvar o documento. Tente novamente."
