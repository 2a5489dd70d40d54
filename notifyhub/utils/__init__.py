from .stats_utils import RunningStats

__all__ = ["RunningStats"]
