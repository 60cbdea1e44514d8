"""Mascaramento de CPF/CNS para a lista de fornecedor."""
from __future__ import annotations
import re

_NON_DIGITS = re.compile(r"\D")


def only_digits(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def mask_cpf(cpf: str | None) -> str | None:
    """123.456.789-01 -> 123.xxx.789-xx"""
    digits = only_digits(cpf)
    if not digits:
        return None
    if len(digits) != 11:
        # formato estranho: não arrisca mostrar nada além do começo
        return digits[:3] + "x" * max(len(digits) - 3, 0)
    return f"{digits[:3]}.xxx.{digits[6:9]}-xx"


def mask_cns(cns: str | None) -> str | None:
    """CNS de 15 dígitos -> 3 primeiros + xxxxxx + 3 últimos."""
    digits = only_digits(cns)
    if not digits:
        return None
    if len(digits) < 9:
        return "x" * len(digits)
    return f"{digits[:3]}xxxxxx{digits[-3:]}"


def format_cpf(cpf: str | None) -> str | None:
    digits = only_digits(cpf)
    if len(digits) != 11:
        return digits or None
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"
