"""Error types raised while turning command arguments into wasm messages.

Every failure is raised as soon as it is detected; nothing is accumulated or
downgraded to a default. The CLI reports the message and exits non-zero.
"""

from __future__ import annotations


class TxBuildError(RuntimeError):
    """Base class for all request and grant construction failures."""


class MalformedInputError(TxBuildError):
    """Raised for unparsable coin, address, boolean, integer or hex input."""


class MissingRequiredError(TxBuildError):
    """Raised when a mandatory value (label, expiration, admin policy) is absent."""


class ConflictingFlagsError(TxBuildError):
    """Raised when flags that exclude each other are combined."""


class UnsupportedValueError(TxBuildError):
    """Raised for unknown grant kinds or flags that have been removed."""


class ResolutionError(TxBuildError):
    """Raised when a key name cannot be resolved to an address."""


class KeyNotFoundError(ResolutionError):
    """Raised by key lookups for unknown names."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: key not found")
        self.name = name


class StructuralValidationError(TxBuildError):
    """Raised when an assembled message fails its own basic validation."""


class SubmitRejectedError(StructuralValidationError):
    """Raised when the signer rejects a message it was asked to submit."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"signer error {code}: {message}")
        self.code = code
        self.message = message


class NetworkError(TxBuildError):
    """Raised when the signer endpoint is unreachable or answers garbage."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
