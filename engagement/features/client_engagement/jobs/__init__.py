from .report_job import log_report_highlights, run_engagement_batch, run_engagement_report

__all__ = ["log_report_highlights", "run_engagement_batch", "run_engagement_report"]
