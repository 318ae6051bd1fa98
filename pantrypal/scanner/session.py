"""Scan sessions, candidate selection, and the single-session coordinator."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from .errors import PantryPalError, SessionBusy
from .result import DetectionError, Err, Ok, Result

if TYPE_CHECKING:
    from .camera import CaptureController, RawImage
    from .commit import CommitPipeline, CommitResult
    from .detection import DetectionOutcome, DetectionService
    from .models import DetectionCandidate, Identity

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CAPTURING = "capturing"
    ANALYZING = "analyzing"
    REVIEWING = "reviewing"
    EMPTY = "empty"
    COMMITTING = "committing"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


_CLOSED = (SessionState.EMPTY, SessionState.COMMITTED, SessionState.CANCELLED)


class SelectionState:
    """Include/exclude choices over a fixed set of candidate names.

    Everything starts selected.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self._names = tuple(dict.fromkeys(names))
        self._selected = set(self._names)

    def toggle(self, name: str) -> bool:
        """Flip ``name`` and return whether it is now selected."""
        if name not in self._names:
            raise KeyError(name)
        if name in self._selected:
            self._selected.discard(name)
            return False
        self._selected.add(name)
        return True

    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    def is_selected(self, name: str) -> bool:
        return name in self._selected

    def select_all(self) -> None:
        self._selected = set(self._names)

    def clear(self) -> None:
        self._selected.clear()


@dataclass
class ScanSession:
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: SessionState = SessionState.CAPTURING
    image: RawImage | None = None
    candidates: list[DetectionCandidate] = field(default_factory=list)
    selection: SelectionState = field(default_factory=lambda: SelectionState(()))
    source: str | None = None
    error: DetectionError | None = None

    @property
    def is_open(self) -> bool:
        return self.state not in _CLOSED

    def selected_candidates(self) -> list[DetectionCandidate]:
        """Selected candidates in detection order."""
        chosen = self.selection.selected()
        return [c for c in self.candidates if c.name in chosen]


class ScanCoordinator:
    """Owns the one scan session an interaction surface may have open."""

    def __init__(self) -> None:
        self._active: ScanSession | None = None

    @property
    def active(self) -> ScanSession | None:
        return self._active

    def start(self) -> ScanSession:
        if self._active is not None and self._active.is_open:
            raise SessionBusy(f"Scan session {self._active.id} is still in progress")
        self._active = ScanSession()
        logger.debug("Started scan session %s", self._active.id)
        return self._active

    def cancel(self) -> None:
        """Discard the active session. Results still in flight are ignored on arrival."""
        if self._active is None:
            return
        if self._active.is_open:
            self._active.state = SessionState.CANCELLED
            logger.debug("Cancelled scan session %s", self._active.id)
        self._active = None

    def attach_image(self, session_id: str, image: RawImage) -> bool:
        session = self._current(session_id)
        if session is None:
            return False
        _require(session, SessionState.CAPTURING)
        session.image = image
        session.state = SessionState.ANALYZING
        return True

    def apply_detection(
        self,
        session_id: str,
        result: Result[DetectionOutcome, DetectionError],
    ) -> bool:
        """Store a detection result on its session.

        Returns False, and changes nothing, if that session has been torn
        down or replaced in the meantime.
        """
        session = self._current(session_id)
        if session is None:
            logger.debug("Discarding stale detection result for session %s", session_id)
            return False
        _require(session, SessionState.ANALYZING)

        match result:
            case Ok(value=outcome):
                session.candidates = list(outcome.candidates)
                session.selection = SelectionState(c.name for c in session.candidates)
                session.source = outcome.source
                session.error = outcome.reason
                session.state = SessionState.REVIEWING
            case Err(error=error):
                session.candidates = []
                session.selection = SelectionState(())
                session.error = error
                session.state = SessionState.EMPTY
        return True

    async def scan(
        self,
        controller: CaptureController,
        detector: DetectionService,
        user_id: str | None,
    ) -> ScanSession:
        """Start a session, capture one image and run detection on it.

        Any exception from capture or detection cancels the session before
        it propagates.
        """
        session = self.start()
        try:
            image = await controller.capture()
            if self.attach_image(session.id, image):
                result = await detector.detect(image, user_id)
                self.apply_detection(session.id, result)
        except BaseException:
            if self._active is session:
                self.cancel()
            raise
        return session

    def commit(
        self,
        session_id: str,
        pipeline: CommitPipeline,
        identity: Identity,
        quantities: dict[str, float] | None = None,
    ) -> CommitResult:
        """Commit the session's selection and close it.

        On failure the session returns to review so the user can retry.
        """
        session = self._current(session_id)
        if session is None:
            raise SessionBusy(f"Scan session {session_id} is no longer active")
        _require(session, SessionState.REVIEWING)

        session.state = SessionState.COMMITTING
        try:
            result = pipeline.commit(session.selected_candidates(), identity, quantities)
        except PantryPalError:
            session.state = SessionState.REVIEWING
            raise

        session.state = SessionState.COMMITTED
        self._active = None
        return result

    def _current(self, session_id: str) -> ScanSession | None:
        session = self._active
        if session is None or session.id != session_id or not session.is_open:
            return None
        return session


def _require(session: ScanSession, *states: SessionState) -> None:
    if session.state not in states:
        expected = ", ".join(s.value for s in states)
        raise RuntimeError(
            f"Scan session {session.id} is {session.state.value}, expected {expected}"
        )
