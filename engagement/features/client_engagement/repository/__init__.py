from .record_store import PostgresRecordStore, RecordStore

__all__ = ["PostgresRecordStore", "RecordStore"]
