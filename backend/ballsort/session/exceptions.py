class SessionError(Exception):
    """Base exception for session lifecycle failures."""


class InvalidSessionIdError(SessionError):
    """Client supplied a session id that does not match the required format.

    The connection is closed with a policy-violation code rather than
    answered, since a well-behaved client always generates a valid id.
    """

    def __init__(self, session_id: object) -> None:
        self.session_id = session_id
        super().__init__(f"invalid session id: {session_id!r}")
