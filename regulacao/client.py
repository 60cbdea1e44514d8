"""
Cliente do link de lista para uso fora do navegador (tablet do motorista,
scripts do fornecedor).

O acompanhamento de envios/concluídos fica só na memória do cliente: nada
disso vai para o servidor, e um cliente novo começa com tudo pendente.
"""
from __future__ import annotations

import requests


class UploadTracker:
    """Contagem de envios e itens concluídos, por registro."""

    def __init__(self):
        self._items: dict[int, dict] = {}

    def get(self, item_id: int) -> dict:
        entry = self._items.get(item_id) or {"count": 0, "completed": False}
        return dict(entry)

    def record_upload(self, item_id: int) -> int:
        entry = self._items.setdefault(item_id, {"count": 0, "completed": False})
        entry["count"] += 1
        return entry["count"]

    def mark_completed(self, item_id: int) -> None:
        self._items.setdefault(item_id, {"count": 0, "completed": False})["completed"] = True

    def is_completed(self, item_id: int) -> bool:
        return self.get(item_id)["completed"]

    def pending(self, items: list[dict]) -> list[dict]:
        return [item for item in items if not self.is_completed(item["id"])]

    @property
    def completed_count(self) -> int:
        return sum(1 for entry in self._items.values() if entry["completed"])

    def reset(self) -> None:
        self._items.clear()


class ListClientError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} {code}: {message}")

    @property
    def should_refetch(self) -> bool:
        # lista desatualizada (item fora da lista / ação não permitida)
        return self.status_code == 409

    @property
    def link_unusable(self) -> bool:
        return self.code in ("not_found", "expired", "exhausted")


class ListClient:
    def __init__(self, base_url: str, list_hash: str, session=None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.list_hash = list_hash
        self.session = session or requests.Session()
        self.timeout = timeout
        self.tracker = UploadTracker()
        self.data: dict | None = None

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/lists/{self.list_hash}"

    def _check(self, res) -> dict:
        try:
            body = res.json()
        except ValueError:
            body = {}
        if res.status_code >= 400:
            raise ListClientError(
                res.status_code,
                body.get("error") or "http_error",
                body.get("message") or f"Erro {res.status_code}",
            )
        return body

    def fetch(self) -> dict:
        self.data = self._check(self.session.get(self.url, timeout=self.timeout))
        return self.data

    def update(self, item_id: int, status: str | None = None, notes: str | None = None,
               scheduled_date: str | None = None) -> dict:
        payload = {"itemId": item_id}
        if status:
            payload["status"] = status
        if notes:
            payload["notes"] = notes
        if scheduled_date:
            payload["scheduledDate"] = scheduled_date
        return self._check(self.session.patch(self.url, json=payload, timeout=self.timeout))

    def upload(self, item_id: int, file_obj, filename: str, document_type: str = "PEDIDO_MEDICO",
               notes: str | None = None, content_type: str = "image/jpeg") -> dict:
        res = self.session.post(
            f"{self.url}/upload",
            data={"itemId": str(item_id), "documentType": document_type, "notes": notes or ""},
            files={"file": (filename, file_obj, content_type)},
            timeout=self.timeout,
        )
        body = self._check(res)
        self.tracker.record_upload(item_id)
        return body

    def complete(self, item_id: int) -> None:
        self.tracker.mark_completed(item_id)

    def pending_items(self) -> list[dict]:
        if self.data is None:
            self.fetch()
        return self.tracker.pending(self.data["items"])

    @property
    def completed_count(self) -> int:
        return self.tracker.completed_count
