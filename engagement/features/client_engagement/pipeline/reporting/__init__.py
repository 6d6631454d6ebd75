from .service import ReportGenerator

__all__ = ["ReportGenerator"]
