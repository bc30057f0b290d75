ROLE_VALUES = [
    'super_admin',
    'admin',
    'teacher',
    'student',
]
STAFF_ROLES = ['super_admin', 'admin', 'teacher']
LEARNER_ROLES = ['student']

QUESTION_TYPE_VALUES = ['mcq', 'true_false', 'short_answer', 'essay']
AUTO_GRADED_QUESTION_TYPES = ['mcq', 'true_false']
DIFFICULTY_VALUES = ['easy', 'medium', 'hard']

TEST_STATUS_DRAFT = 'draft'
TEST_STATUS_PUBLISHED = 'published'
TEST_STATUS_CLOSED = 'closed'
TEST_STATUS_VALUES = [TEST_STATUS_DRAFT, TEST_STATUS_PUBLISHED, TEST_STATUS_CLOSED]

ATTEMPT_STATUS_IN_PROGRESS = 'in_progress'
ATTEMPT_STATUS_SUBMITTED = 'submitted'
ATTEMPT_STATUS_GRADED = 'graded'
ATTEMPT_STATUS_VALUES = [ATTEMPT_STATUS_IN_PROGRESS, ATTEMPT_STATUS_SUBMITTED, ATTEMPT_STATUS_GRADED]
COMPLETED_ATTEMPT_STATUSES = [ATTEMPT_STATUS_SUBMITTED, ATTEMPT_STATUS_GRADED]

DEFAULT_QUESTION_MARKS = 4.0


def sql_in(values: list[str]) -> str:
    return ', '.join(f"'{value}'" for value in values)
