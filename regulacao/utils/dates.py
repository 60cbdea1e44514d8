from __future__ import annotations
from datetime import datetime, date, timezone


def utcnow() -> datetime:
    """Agora em UTC, sem tzinfo (é assim que o banco guarda)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def age_on(birth: date | None, today: date | None = None) -> int | None:
    if not birth:
        return None
    today = today or utcnow().date()
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def isoformat(value: datetime | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat() + "Z"
    return value.isoformat()


def parse_iso_datetime(raw: str, require_offset: bool = False) -> datetime:
    """
    Aceita 'YYYY-MM-DDTHH:MM[:SS]' com ou sem 'Z'/offset; devolve UTC ingênuo.
    Com require_offset, hora sem fuso (hora local do aparelho) é recusada.
    """
    value = (raw or "").strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        if require_offset:
            raise ValueError(f"Data sem fuso horário: {raw}")
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
