from .score_cache import ScoreCache

__all__ = ["ScoreCache"]
