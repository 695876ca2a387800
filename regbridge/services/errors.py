"""
Error taxonomy for the verification bridge.
Every error carries a human-readable message and the HTTP status the API
layer responds with. PersistenceFailure never leaves the handle directory.
"""


class BridgeError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BridgeError):
    """A required request field is missing or empty."""


class NotRegistered(BridgeError):
    """The handle has no known chat id (the user never sent /start)."""


class NotFound(BridgeError):
    """No pending verification code for the handle."""


class Expired(BridgeError):
    """The pending code is past its validity window."""


class Mismatch(BridgeError):
    """The submitted code differs from the pending one."""


class DispatchFailure(BridgeError):
    status_code = 500


class PersistenceFailure(BridgeError):
    status_code = 500


class RegistrationFailure(BridgeError):
    status_code = 502
