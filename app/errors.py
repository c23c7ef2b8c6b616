"""Domain errors raised by the services."""


class TimeTrackerError(Exception):
    """Base class for service errors."""


class AlreadyActiveError(TimeTrackerError, ValueError):
    """A work session is already running for the user."""

    def __init__(self, message: str = "Work session already active"):
        super().__init__(message)


class NoActiveSessionError(TimeTrackerError, ValueError):
    """The user has no running work session."""

    def __init__(self, message: str = "No active work session"):
        super().__init__(message)


class StorageUnavailableError(TimeTrackerError):
    """The database could not complete a read or write."""

    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message)


class EmailDeliveryFailedError(TimeTrackerError):
    """The email provider rejected or never received a message."""


class InvitationError(TimeTrackerError, ValueError):
    """An invitation could not be created or accepted."""


class TaskNotFoundError(TimeTrackerError, ValueError):
    """No task with that id is visible to the caller."""

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class InvalidAssigneeError(TimeTrackerError, ValueError):
    """A task was assigned to someone outside the creator's team."""

    def __init__(self, message: str = "Assignee is not a member of your team"):
        super().__init__(message)


class MemberNotFoundError(TimeTrackerError, ValueError):
    """No member with that id belongs to the owner's team."""

    def __init__(self, message: str = "Team member not found"):
        super().__init__(message)
