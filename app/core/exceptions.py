# app/core/exceptions.py


class ProviderError(Exception):
    """Raised by a completion provider. The message is shown to the user as-is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SessionNotFoundError(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id