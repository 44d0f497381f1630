from .dispatcher import DispatchReport, OutboxDispatcher
from .outbox import OutboxRecord, SqlAlchemyJobOutbox

__all__ = ["DispatchReport", "OutboxDispatcher", "OutboxRecord", "SqlAlchemyJobOutbox"]
