"""Errors raised by the BizTrack services.

Every message is written for the person at the counter and may be shown as-is.
"""


class BizTrackError(Exception):
    """Base class for rejected operations. Nothing is written when raised."""

    @property
    def kind(self) -> str:
        name = type(self).__name__
        return name[: -len("Error")] if name.endswith("Error") else name


class ValidationError(BizTrackError):
    """Raised when a payload breaks a rule the core enforces itself."""


# --- registration ---
class DuplicateEmailError(BizTrackError):
    pass


class BusinessNameTakenError(BizTrackError):
    pass


class BusinessNotFoundError(BizTrackError):
    pass


# --- login ---
class AccountNotFoundError(BizTrackError):
    pass


class BusinessMismatchError(BizTrackError):
    pass


class InvalidCredentialError(BizTrackError):
    pass


class RoleMismatchError(BizTrackError):
    pass


# --- access ---
class AccountNotApprovedError(BizTrackError):
    """The acting account is pending or rejected."""


class PermissionDeniedError(BizTrackError):
    """The acting account's role or business does not allow the operation."""


class InvalidStatusTransitionError(BizTrackError):
    pass
