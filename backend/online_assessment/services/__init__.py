from online_assessment.services import (
    analytics_service,
    answer_keys,
    attempt_service,
    audit_service,
    auth_service,
    availability_service,
    bootstrap_service,
    grading_service,
    question_bank_service,
    roster_service,
    test_service,
)

__all__ = [
    'analytics_service',
    'answer_keys',
    'attempt_service',
    'audit_service',
    'auth_service',
    'availability_service',
    'bootstrap_service',
    'grading_service',
    'question_bank_service',
    'roster_service',
    'test_service',
]
