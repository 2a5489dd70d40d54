from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .report import DispatchReport, HandlerOutcome


class HubError(Exception):
    """Base class for errors raised by notifyhub."""


class InvalidSubscription(HubError, TypeError):
    """Raised by subscribe when the kind or handler is unusable."""

    def __init__(self, kind: Any, handler: Any, reason: str) -> None:
        super().__init__(f"cannot subscribe {handler!r} to {kind!r}: {reason}")
        self.kind = kind
        self.handler = handler
        self.reason = reason


class DispatchError(HubError):
    """
    One or more handlers failed during a dispatch.

    Never raised by publish itself; only by DispatchReport.raise_for_failures().
    """

    def __init__(self, report: "DispatchReport") -> None:
        self.report = report
        self.failures: list["HandlerOutcome"] = report.failures
        first = self.failures[0].error if self.failures else None
        super().__init__(
            f"{len(self.failures)} of {len(report)} handler(s) failed "
            f"for {report.kind!r}: {first!r}"
        )
