"""Live preview sessions.

Each ``mount`` gets an increasing sequence number and supersedes every
earlier one. A render that finishes after a newer mount has started is
discarded: the newest input wins, whatever order the renders complete in.
"""
import itertools
import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional
from flask import current_app
from app.sandbox.result import RenderResult

logger = logging.getLogger(__name__)

_render_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="preview-render")


@dataclass
class PreviewState:
    input_id: int = 0
    loading: bool = False
    result: Optional[RenderResult] = None


class PreviewSession:
    def __init__(self, renderer, executor=None):
        self.renderer = renderer
        self._executor = executor or _render_pool
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._state = PreviewState()

    @property
    def state(self):
        with self._lock:
            return PreviewState(self._state.input_id, self._state.loading, self._state.result)

    def mount(self, code, css=None):
        """Start rendering ``code``; returns (input_id, future).

        Prior result and error state are cleared immediately.
        """
        app = current_app._get_current_object()
        with self._lock:
            input_id = next(self._counter)
            self._state = PreviewState(input_id=input_id, loading=True)
        future = self._executor.submit(self._render, app, input_id, code, css)
        return input_id, future

    def is_current(self, input_id):
        with self._lock:
            return self._state.input_id == input_id

    def _render(self, app, input_id, code, css):
        try:
            with app.app_context():
                result = self.renderer.render(code, css)
        except Exception:
            logger.exception("Preview render %d crashed", input_id)
            self._settle(input_id, None)
            raise
        # Settled here, not in a done-callback, so waiters see the final state
        self._settle(input_id, result)
        return result

    def _settle(self, input_id, result):
        with self._lock:
            if input_id != self._state.input_id:
                logger.info(
                    "Discarding stale preview render %d (current is %d)",
                    input_id,
                    self._state.input_id,
                )
                return False
            self._state = PreviewState(input_id=input_id, loading=False, result=result)
            return True


class SessionRegistry:
    """Bounded map of session id to PreviewSession, least recently used evicted."""

    def __init__(self, max_sessions=256):
        self.max_sessions = max_sessions
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id, renderer_factory):
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = PreviewSession(renderer_factory())
                self._sessions[session_id] = session
                while len(self._sessions) > self.max_sessions:
                    self._sessions.popitem(last=False)
            else:
                self._sessions.move_to_end(session_id)
            return session

    def clear(self):
        with self._lock:
            self._sessions.clear()


sessions = SessionRegistry()
