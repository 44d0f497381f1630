from .downstream_port import IndexPort, StoragePort
from .event_log_port import EventLogPort
from .job_queue_port import JobSubmissionPort
from .ownership_port import OwnershipResolverPort

__all__ = ["IndexPort", "StoragePort", "EventLogPort", "JobSubmissionPort", "OwnershipResolverPort"]
