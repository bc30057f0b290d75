"""question bank, online tests, attempts and responses

Revision ID: 0002_online_tests
Revises: 0001_auth_and_roster
Create Date: 2026-10-01 00:30:00.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = '0002_online_tests'
down_revision: str | None = '0001_auth_and_roster'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('updated_by', postgresql.UUID(as_uuid=True), nullable=True),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'questions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('class_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('chapter', sa.String(length=200), nullable=True),
        sa.Column('topic', sa.String(length=200), nullable=True),
        sa.Column('question_type', sa.String(length=30), nullable=False),
        sa.Column('difficulty', sa.String(length=20), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('options', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('correct_answer', sa.String(length=200), nullable=True),
        sa.Column('answer_explanation', sa.Text(), nullable=True),
        sa.Column('marks', sa.Float(), nullable=False, server_default='4'),
        sa.Column('negative_marks', sa.Float(), nullable=False, server_default='0'),
        *_audit_columns(),
        sa.CheckConstraint(
            "question_type in ('mcq', 'true_false', 'short_answer', 'essay')",
            name='question_type_values',
        ),
        sa.CheckConstraint(
            "difficulty is null or difficulty in ('easy', 'medium', 'hard')",
            name='question_difficulty_values',
        ),
        sa.CheckConstraint('marks >= 0', name='question_marks_non_negative'),
        sa.CheckConstraint('negative_marks >= 0', name='question_negative_marks_non_negative'),
    )
    op.create_index('ix_questions_subject_id', 'questions', ['subject_id'])
    op.create_index('ix_questions_class_id', 'questions', ['class_id'])
    op.create_index('ix_questions_type', 'questions', ['question_type'])
    op.create_index('ix_questions_difficulty', 'questions', ['difficulty'])

    op.create_table(
        'online_tests',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('class_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('section_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('max_attempts', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shuffle_questions', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('shuffle_options', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('show_results_immediately', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('show_correct_answers', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('allow_review', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('passing_marks', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='draft'),
        sa.Column('total_marks', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint("status in ('draft', 'published', 'closed')", name='online_test_status_values'),
        sa.CheckConstraint('duration_minutes > 0', name='online_test_duration_positive'),
        sa.CheckConstraint('max_attempts > 0', name='online_test_max_attempts_positive'),
    )
    op.create_index('ix_online_tests_title', 'online_tests', ['title'])
    op.create_index('ix_online_tests_status', 'online_tests', ['status'])
    op.create_index('ix_online_tests_class_section', 'online_tests', ['class_id', 'section_id'])
    op.create_index('ix_online_tests_subject_id', 'online_tests', ['subject_id'])
    op.create_index('ix_online_tests_created_by', 'online_tests', ['created_by'])

    op.create_table(
        'test_questions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('test_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('question_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        sa.Column('marks', sa.Float(), nullable=False),
        sa.Column('negative_marks', sa.Float(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['test_id'], ['online_tests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('test_id', 'sequence_order', name='uq_test_questions_sequence'),
        sa.CheckConstraint('sequence_order > 0', name='test_question_sequence_positive'),
    )
    op.create_index('ix_test_questions_test_id', 'test_questions', ['test_id'])

    op.create_table(
        'test_attempts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('test_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('learner_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='in_progress'),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_score', sa.Float(), nullable=True),
        sa.Column('percentage', sa.Float(), nullable=True),
        sa.Column('questions_answered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('correct_answers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'question_order',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['test_id'], ['online_tests.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['learner_id'], ['learners.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('test_id', 'learner_id', 'attempt_number', name='uq_test_attempts_number'),
        sa.CheckConstraint(
            "status in ('in_progress', 'submitted', 'graded')",
            name='test_attempt_status_values',
        ),
    )
    op.create_index('ix_test_attempts_test_id', 'test_attempts', ['test_id'])
    op.create_index('ix_test_attempts_learner_id', 'test_attempts', ['learner_id'])
    op.create_index(
        'uq_test_attempts_in_progress',
        'test_attempts',
        ['test_id', 'learner_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
    )

    op.create_table(
        'test_responses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('attempt_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('test_question_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('question_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        sa.Column('marks', sa.Float(), nullable=False),
        sa.Column('negative_marks', sa.Float(), nullable=False, server_default='0'),
        sa.Column(
            'question_snapshot',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            'selected_options',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column('response_text', sa.Text(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('marks_obtained', sa.Float(), nullable=False, server_default='0'),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
        sa.Column('auto_graded', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        *_timestamps(),
        sa.ForeignKeyConstraint(['attempt_id'], ['test_attempts.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('attempt_id', 'sequence_order', name='uq_test_responses_sequence'),
        sa.UniqueConstraint('attempt_id', 'test_question_id', name='uq_test_responses_test_question'),
    )
    op.create_index('ix_test_responses_attempt_id', 'test_responses', ['attempt_id'])


def downgrade() -> None:
    op.drop_index('ix_test_responses_attempt_id', table_name='test_responses')
    op.drop_table('test_responses')
    op.drop_index('uq_test_attempts_in_progress', table_name='test_attempts')
    op.drop_index('ix_test_attempts_learner_id', table_name='test_attempts')
    op.drop_index('ix_test_attempts_test_id', table_name='test_attempts')
    op.drop_table('test_attempts')
    op.drop_index('ix_test_questions_test_id', table_name='test_questions')
    op.drop_table('test_questions')
    op.drop_index('ix_online_tests_created_by', table_name='online_tests')
    op.drop_index('ix_online_tests_subject_id', table_name='online_tests')
    op.drop_index('ix_online_tests_class_section', table_name='online_tests')
    op.drop_index('ix_online_tests_status', table_name='online_tests')
    op.drop_index('ix_online_tests_title', table_name='online_tests')
    op.drop_table('online_tests')
    op.drop_index('ix_questions_difficulty', table_name='questions')
    op.drop_index('ix_questions_type', table_name='questions')
    op.drop_index('ix_questions_class_id', table_name='questions')
    op.drop_index('ix_questions_subject_id', table_name='questions')
    op.drop_table('questions')
