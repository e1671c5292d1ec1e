# app/services/inflight.py
import threading
from typing import Dict


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class InFlightRegistry:
    """
    At most one live generation per session. Starting a new one cancels the
    previous token; the older request must then discard its result.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tokens: Dict[str, CancellationToken] = {}

    def begin(self, session_id: str) -> CancellationToken:
        token = CancellationToken()
        with self._lock:
            previous = self._tokens.get(session_id)
            if previous is not None:
                previous.cancel()
            self._tokens[session_id] = token
        return token

    def finish(self, session_id: str, token: CancellationToken):
        with self._lock:
            if self._tokens.get(session_id) is token:
                del self._tokens[session_id]
