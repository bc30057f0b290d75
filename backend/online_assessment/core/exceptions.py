"""
Domain errors raised by the service layer.

Each error is an ``HTTPException`` so routers can let it propagate untouched;
``code`` lets clients tell an already-submitted attempt apart from a real
failure without parsing the message.
"""

from fastapi import HTTPException, status


class AssessmentError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'assessment_error'

    def __init__(self, detail: str, *, code: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail)
        if code:
            self.code = code


class NotFoundError(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'


class InvalidStateError(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_state'


class PolicyViolationError(AssessmentError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'policy_violation'


class ConflictError(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'


ALREADY_SUBMITTED = 'already_submitted'
