from online_assessment.schemas.analytics import TestAnalyticsOut
from online_assessment.schemas.attempt import (
    AttemptDetailOut,
    AttemptListResponse,
    AttemptOut,
    AttemptStartRequest,
    AttemptSubmit,
    AttemptSubmitOut,
    ResponseSave,
    ResponseSaveOut,
)
from online_assessment.schemas.auth import LoginRequest, TokenResponse, UserSummary
from online_assessment.schemas.common import ErrorResponse, PaginationMeta
from online_assessment.schemas.online_test import (
    AvailableTestListResponse,
    QuestionRemovalOut,
    QuestionReplace,
    TestAssign,
    TestCreate,
    TestDuplicate,
    TestExportResponse,
    TestListResponse,
    TestOut,
    TestUpdate,
)
from online_assessment.schemas.question import (
    AlternativeQuestionListResponse,
    QuestionCreate,
    QuestionListResponse,
    QuestionOut,
)

__all__ = [
    'AlternativeQuestionListResponse',
    'AttemptDetailOut',
    'AttemptListResponse',
    'AttemptOut',
    'AttemptStartRequest',
    'AttemptSubmit',
    'AttemptSubmitOut',
    'AvailableTestListResponse',
    'ErrorResponse',
    'LoginRequest',
    'PaginationMeta',
    'QuestionCreate',
    'QuestionListResponse',
    'QuestionOut',
    'QuestionRemovalOut',
    'QuestionReplace',
    'TestAnalyticsOut',
    'TestAssign',
    'TestCreate',
    'TestDuplicate',
    'TestExportResponse',
    'TestListResponse',
    'TestOut',
    'TestUpdate',
    'TokenResponse',
    'UserSummary',
]
