"""In-process publish/subscribe notification hub."""

from .config import HubConfig, get_default_config, get_lenient_config
from .errors import DispatchError, HubError, InvalidSubscription
from .hub import Handler, NotificationHub, Subscription
from .recorder import DispatchRecorder, KindStats
from .report import DispatchReport, DispatchSummary, HandlerOutcome, OutcomeSummary

__all__ = [
    "DispatchError",
    "DispatchRecorder",
    "DispatchReport",
    "DispatchSummary",
    "Handler",
    "HandlerOutcome",
    "HubConfig",
    "HubError",
    "InvalidSubscription",
    "KindStats",
    "NotificationHub",
    "OutcomeSummary",
    "Subscription",
    "get_default_config",
    "get_lenient_config",
]

__version__ = "0.1.0"
