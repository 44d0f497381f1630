"""
Infrastructure layer: SQLAlchemy stores, job outbox and ARQ worker,
downstream index/storage adapters, audit event logs.
"""
