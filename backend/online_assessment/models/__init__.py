from online_assessment.models.attempt import TestAttempt, TestResponse
from online_assessment.models.audit import AuditLog
from online_assessment.models.online_test import OnlineTest, TestQuestion
from online_assessment.models.question import Question
from online_assessment.models.rbac import Role, User, UserRole
from online_assessment.models.roster import Learner

__all__ = [
    'AuditLog',
    'Learner',
    'OnlineTest',
    'Question',
    'Role',
    'TestAttempt',
    'TestQuestion',
    'TestResponse',
    'User',
    'UserRole',
]
