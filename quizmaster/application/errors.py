"""
Error taxonomy for the attempt and ranking core.

Every rejection leaves state untouched. Each class carries the HTTP status the
transport layer answers with.
"""


class QuizServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizServiceError, ValueError):
    """Malformed input: time limit exceeded, wrong answer shape, bad ids."""

    status_code = 400


class NotFoundError(QuizServiceError, LookupError):
    """Attempt, question or quiz absent, or not owned by the caller."""

    status_code = 404


class StateConflictError(QuizServiceError):
    status_code = 409


class QuizNotApprovedError(StateConflictError):
    # Learners see this as "not available" rather than a conflict
    status_code = 403


class DuplicateAttemptError(StateConflictError):
    pass


class DuplicateAnswerError(StateConflictError):
    pass


class AttemptCompletedError(StateConflictError):
    pass


class PermissionDeniedError(QuizServiceError):
    status_code = 403


class CourseNotCompletedError(PermissionDeniedError):
    pass


class InfrastructureError(QuizServiceError):
    """Storage or external-service failure. Safe to retry."""

    status_code = 503


class CourseServiceUnavailableError(InfrastructureError):
    pass
