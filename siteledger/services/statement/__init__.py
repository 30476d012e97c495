from .builder import build_statement, resolve_day_wage
from .models import StatementDay, TransferRecord, WorkerInfo, WorkerStatement
from .service import StatementService

__all__ = [
    "StatementService",
    "build_statement",
    "resolve_day_wage",
    "WorkerInfo",
    "StatementDay",
    "TransferRecord",
    "WorkerStatement",
]
