from .service import BatchEngine, BatchRunMetrics

__all__ = ["BatchEngine", "BatchRunMetrics"]
