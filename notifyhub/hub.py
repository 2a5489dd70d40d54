import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Hashable,
    List,
    Optional,
    Tuple,
)

from .config import HubConfig, get_default_config
from .errors import InvalidSubscription
from .report import DispatchReport, HandlerOutcome

if TYPE_CHECKING:
    from .recorder import DispatchRecorder

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]

_subscription_ids = itertools.count(1)

# default for clear/subscriber_count; None is a legal kind under a lenient config
_ALL: Any = object()


@dataclass(frozen=True, eq=False)
class Subscription:
    """
    Token for a single registration.

    Equality is identity: registering the same handler twice yields two distinct
    tokens, each removable on its own.
    """

    kind: Hashable
    handler: Handler
    once: bool = False
    id: int = field(default_factory=lambda: next(_subscription_ids))
    hub: Optional["NotificationHub"] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        """Whether this registration is still present in its hub."""
        return self.hub is not None and self.hub._is_registered(self)

    def cancel(self) -> None:
        """Same as hub.unsubscribe(self)."""
        if self.hub is not None:
            self.hub.unsubscribe(self)


class NotificationHub:
    """
    Synchronous in-process pub-sub hub.

    Handlers for a kind run in registration order against a snapshot taken when
    publish starts. A handler raising an Exception is recorded in the returned
    DispatchReport and does not stop the remaining handlers.

    Thread-safe: the registration map is guarded by a lock, handlers are called
    outside of it.
    """

    def __init__(
        self,
        config: Optional[HubConfig] = None,
        recorder: Optional["DispatchRecorder"] = None,
    ) -> None:
        self.config = config if config is not None else get_default_config()
        self.recorder = recorder
        self._subs: Dict[Hashable, List[Subscription]] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self.config.name

    # -------------------------
    # Registration
    # -------------------------
    def subscribe(self, kind: Hashable, handler: Handler) -> Subscription:
        """Register handler under kind and return its token."""
        return self._add(kind, handler, once=False)

    def subscribe_once(self, kind: Hashable, handler: Handler) -> Subscription:
        """Register handler to fire on the next publish of kind only."""
        return self._add(kind, handler, once=True)

    def on(self, kind: Hashable) -> Callable[[Handler], Handler]:
        """Decorator form of subscribe. The handler is returned unchanged."""

        def decorator(handler: Handler) -> Handler:
            self.subscribe(kind, handler)
            return handler

        return decorator

    def unsubscribe(self, token: Subscription) -> None:
        """Remove exactly one registration. Unknown or stale tokens are ignored."""
        with self._lock:
            removed = self._discard_locked(token)
        if removed:
            logger.debug(
                "hub %s: unsubscribed #%d from %r", self.name, token.id, token.kind
            )

    def clear(self, kind: Hashable = _ALL) -> None:
        """Remove all registrations for kind, or for every kind if omitted."""
        with self._lock:
            if kind is _ALL:
                self._subs.clear()
            else:
                self._subs.pop(kind, None)
        logger.debug(
            "hub %s: cleared %s",
            self.name,
            "all kinds" if kind is _ALL else repr(kind),
        )

    def _add(self, kind: Hashable, handler: Handler, once: bool) -> Subscription:
        # registrations live in a dict, so even a lenient hub needs a hashable kind
        self._check_hashable(kind, handler)
        if self.config.validate_handlers:
            self._validate(kind, handler)
        token = Subscription(kind=kind, handler=handler, once=once, hub=self)
        with self._lock:
            self._subs.setdefault(kind, []).append(token)
        logger.debug(
            "hub %s: subscribed #%d to %r%s",
            self.name,
            token.id,
            kind,
            " (once)" if once else "",
        )
        return token

    @staticmethod
    def _check_hashable(kind: Hashable, handler: Handler) -> None:
        try:
            hash(kind)
        except TypeError:
            raise InvalidSubscription(kind, handler, "kind must be hashable") from None

    @staticmethod
    def _validate(kind: Hashable, handler: Handler) -> None:
        if kind is None or kind == "":
            raise InvalidSubscription(kind, handler, "kind must be non-empty")
        if not callable(handler):
            raise InvalidSubscription(kind, handler, "handler is not callable")

    def _discard_locked(self, token: Subscription) -> bool:
        if token.hub is not self:
            return False
        entries = self._subs.get(token.kind)
        if not entries:
            return False
        for i, entry in enumerate(entries):
            if entry is token:
                del entries[i]
                if not entries:
                    del self._subs[token.kind]
                return True
        return False

    def _is_registered(self, token: Subscription) -> bool:
        with self._lock:
            return any(e is token for e in self._subs.get(token.kind, ()))

    # -------------------------
    # Dispatch
    # -------------------------
    def publish(self, kind: Hashable, payload: Any = None) -> DispatchReport:
        """
        Invoke every handler registered under kind with payload.

        Never raises because of a handler; inspect the returned report instead.
        Publishing a kind nobody listens to returns an empty report.
        """
        with self._lock:
            snapshot = tuple(self._subs.get(kind, ()))
            for token in snapshot:
                if token.once:
                    self._discard_locked(token)

        report = DispatchReport(kind=kind, started_at_unix=time.time())
        for index, token in enumerate(snapshot):
            report.outcomes.append(self._invoke(index, token, payload))

        if self.recorder is not None:
            self.recorder.record(report, hub_name=self.name)
        return report

    def _invoke(self, index: int, token: Subscription, payload: Any) -> HandlerOutcome:
        timed = self.config.record_timings
        start = time.perf_counter() if timed else 0.0
        try:
            token.handler(payload)
        except Exception as exc:
            duration = time.perf_counter() - start if timed else 0.0
            if self.config.log_failures:
                logger.error(
                    "hub %s: handler #%d for %r failed: %s",
                    self.name,
                    token.id,
                    token.kind,
                    exc,
                    exc_info=exc,
                )
            return HandlerOutcome(token, index, "failure", exc, duration)
        duration = time.perf_counter() - start if timed else 0.0
        return HandlerOutcome(token, index, "success", None, duration)

    # -------------------------
    # Introspection
    # -------------------------
    def subscriptions(self, kind: Hashable) -> Tuple[Subscription, ...]:
        """Tokens currently registered under kind, in invocation order."""
        with self._lock:
            return tuple(self._subs.get(kind, ()))

    def kinds(self) -> Tuple[Hashable, ...]:
        with self._lock:
            return tuple(self._subs)

    def subscriber_count(self, kind: Hashable = _ALL) -> int:
        with self._lock:
            if kind is not _ALL:
                return len(self._subs.get(kind, ()))
            return sum(len(v) for v in self._subs.values())

    def has_subscribers(self, kind: Hashable) -> bool:
        return self.subscriber_count(kind) > 0

    def __len__(self) -> int:
        return self.subscriber_count()

    def __contains__(self, kind: Hashable) -> bool:
        return self.has_subscribers(kind)

    def __repr__(self) -> str:
        return f"NotificationHub(name={self.name!r}, registrations={len(self)})"
