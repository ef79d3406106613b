class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class SchedulingError(Exception):
    """Base for errors returned synchronously to the caller.

    `code` is stable and machine-readable so clients can show a localized message.
    """

    code = "scheduling_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulingError):
    status_code = 404

    def __init__(self, what: str, identity: object) -> None:
        super().__init__(f"{what.capitalize()} {identity} not found")
        self.code = f"{what}_not_found"


class InactiveEventError(SchedulingError):
    code = "inactive_event"
    status_code = 409


class InvalidMeetingEventError(SchedulingError):
    code = "invalid_event"


class InvalidSlotError(SchedulingError):
    code = "invalid_slot"


class SlotConflictError(SchedulingError):
    code = "slot_conflict"
    status_code = 409


class DuplicateRequestError(SchedulingError):
    code = "duplicate_request"
    status_code = 409


class InvalidOrExpiredCodeError(SchedulingError):
    code = "invalid_code"

    def __init__(self, message: str = "Invalid or expired verification code") -> None:
        super().__init__(message)


class AlreadyVerifiedError(SchedulingError):
    code = "already_verified"
    status_code = 409


class InvalidTransitionError(SchedulingError):
    code = "invalid_transition"
    status_code = 409


class AdminNotAllowedError(SchedulingError):
    code = "admin_not_allowed"
    status_code = 403
