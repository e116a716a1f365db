"""Key notation exceptions."""


class KeyNotationError(ValueError):
    """Base exception for key parsing failures."""

    def __init__(self, value: str, message: str):
        self.value = value
        super().__init__(message)


class InvalidCamelotCode(KeyNotationError):
    """Raised when a string is not a Camelot code in 1A..12B."""

    def __init__(self, value: str):
        super().__init__(value, f"Invalid Camelot code: {value!r}")


class UnrecognizedKeyString(KeyNotationError):
    """Raised when a free-text key has no recognizable root note."""

    def __init__(self, value: str):
        super().__init__(value, f"Unrecognized key string: {value!r}")
