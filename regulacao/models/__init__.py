from .subscriber import Subscriber
from .user import User
from .citizen import Citizen, Professional
from .regulation import Care, Regulation
from .schedule import Schedule
from .document import RegulationDocument
from .record_event import RecordEvent
from .list_batch import ListBatch, ListBatchItem

__all__ = [
    # Assinantes / Usuários
    "Subscriber",
    "User",

    # Cadastros
    "Citizen",
    "Professional",
    "Care",

    # Regulação e agendamento
    "Regulation",
    "Schedule",
    "RegulationDocument",
    "RecordEvent",

    # Listas (links temporários)
    "ListBatch",
    "ListBatchItem",
]
