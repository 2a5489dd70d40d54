from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Hashable, Iterator, Literal, Optional

from pydantic import BaseModel, Field

from .errors import DispatchError

if TYPE_CHECKING:
    from .hub import Subscription


Status = Literal["success", "failure"]


@dataclass(frozen=True)
class HandlerOutcome:
    """Result of invoking one handler during a publish."""

    subscription: "Subscription"
    index: int  # position in the publish snapshot
    status: Status
    error: Optional[BaseException] = None
    duration: float = 0.0

    @property
    def handler(self) -> Callable[[Any], Any]:
        return self.subscription.handler

    @property
    def ok(self) -> bool:
        return self.status == "success"


class OutcomeSummary(BaseModel):
    """JSON-friendly view of a HandlerOutcome."""

    index: int
    subscription_id: int
    handler: str
    status: Status
    error_type: Optional[str] = None
    error: Optional[str] = None
    duration: float = 0.0


class DispatchSummary(BaseModel):
    """JSON-friendly view of a DispatchReport."""

    kind: str
    invoked: int
    succeeded: int
    failed: int
    started_at_unix: float
    outcomes: list[OutcomeSummary] = Field(default_factory=list)


def handler_name(handler: Any) -> str:
    name = getattr(handler, "__name__", None)
    return name if name else repr(handler)


@dataclass
class DispatchReport:
    """
    Ordered record of one publish call, one outcome per invoked handler.

    An empty report means nobody was subscribed; it is still a successful dispatch.
    """

    kind: Hashable
    outcomes: list[HandlerOutcome] = field(default_factory=list)
    started_at_unix: float = 0.0

    def __len__(self) -> int:
        return len(self.outcomes)

    def __bool__(self) -> bool:
        # a report always stands for a completed dispatch, even an empty one
        return True

    def __iter__(self) -> Iterator[HandlerOutcome]:
        return iter(self.outcomes)

    def __getitem__(self, index: int) -> HandlerOutcome:
        return self.outcomes[index]

    @property
    def ok(self) -> bool:
        """True when no handler failed (also for an empty report)."""
        return all(o.ok for o in self.outcomes)

    @property
    def succeeded(self) -> list[HandlerOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[HandlerOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def errors(self) -> list[BaseException]:
        return [o.error for o in self.outcomes if o.error is not None]

    @property
    def handlers(self) -> list[Callable[[Any], Any]]:
        return [o.handler for o in self.outcomes]

    def raise_for_failures(self) -> None:
        """Escalate captured failures as a DispatchError; no-op if all handlers succeeded."""
        if not self.ok:
            raise DispatchError(self) from self.failures[0].error

    def summary(self) -> DispatchSummary:
        outcomes = [
            OutcomeSummary(
                index=o.index,
                subscription_id=o.subscription.id,
                handler=handler_name(o.handler),
                status=o.status,
                error_type=type(o.error).__name__ if o.error is not None else None,
                error=str(o.error) if o.error is not None else None,
                duration=o.duration,
            )
            for o in self.outcomes
        ]
        failed = sum(1 for o in self.outcomes if not o.ok)
        return DispatchSummary(
            kind=str(self.kind),
            invoked=len(self.outcomes),
            succeeded=len(self.outcomes) - failed,
            failed=failed,
            started_at_unix=self.started_at_unix,
            outcomes=outcomes,
        )
