"""Inspector – ProfileSession state machine."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field

from mp_pprof.inspector.http import ConnectionId
from mp_pprof.kernel.errors import BaseError

__all__ = ["ProfileSession", "SessionSnapshot", "SessionState", "SessionStateError"]


class SessionStateError(BaseError):
    """A session transition was attempted from the wrong state."""

    default_code = "session_state_error"


class SessionState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only copy of a session, taken under the coordinator's lock."""

    state: SessionState
    waiters: frozenset[ConnectionId]
    window_seconds: float | None
    generation: int


@dataclass
class ProfileSession:
    """One profiling kind's IDLE/RUNNING cycle.

    Not thread-safe on its own; the owning coordinator holds its lock around
    every call.  IDLE means no waiters and no pending timer; RUNNING means a
    pending timer and at least one waiter.
    """

    state: SessionState = SessionState.IDLE
    waiters: set[ConnectionId] = field(default_factory=set)
    window_seconds: float | None = None
    generation: int = 0

    def begin(self, window_seconds: float, first_waiter: ConnectionId) -> None:
        if self.state is not SessionState.IDLE:
            raise SessionStateError("session already running")
        self.state = SessionState.RUNNING
        self.window_seconds = window_seconds
        self.generation += 1
        self.waiters.add(first_waiter)

    def join(self, connection_id: ConnectionId) -> None:
        if self.state is not SessionState.RUNNING:
            raise SessionStateError("cannot join an idle session")
        self.waiters.add(connection_id)

    def drain(self) -> set[ConnectionId]:
        """Take every waiter and return to IDLE."""
        waiters, self.waiters = self.waiters, set()
        self.state = SessionState.IDLE
        self.window_seconds = None
        return waiters

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            waiters=frozenset(self.waiters),
            window_seconds=self.window_seconds,
            generation=self.generation,
        )
