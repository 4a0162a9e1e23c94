"""Engine error taxonomy. Each error maps to one HTTP status in app.main."""


class GameError(Exception):
    """Base class for errors raised by game operations. State is never modified."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(GameError):
    """Payload passed schema validation but its free-form part does not fit the target shape."""

    status_code = 400


class NotFoundError(GameError):
    """Unknown attack id, notification id or vault entry id."""

    status_code = 404


class PreconditionError(GameError):
    """The operation is valid but not allowed in the current state (e.g. attack on cooldown)."""

    status_code = 400


class StoreError(GameError):
    """Reading or writing the session store failed."""

    status_code = 500
