"""initial schema

Revision ID: 4b1d2c7e9a10
Revises:
Create Date: 2025-09-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4b1d2c7e9a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('linked_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("role IN ('admin','teacher','student')", name='ck_user_role'),
        sa.CheckConstraint("status IN ('active','inactive')", name='ck_user_status'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_linked_id', 'users', ['linked_id'])

    op.create_table(
        'students',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('registration_number', sa.String(length=32), nullable=True),
        sa.Column('class_name', sa.String(length=40), nullable=True),
        sa.Column('guardian', sa.String(length=150), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('enrollment_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('registration_number'),
        sa.CheckConstraint(
            "status IN ('active','inactive','graduated','suspended')", name='ck_student_status'
        ),
    )
    op.create_index('ix_students_name', 'students', ['name'])
    op.create_index('ix_students_class_name', 'students', ['class_name'])

    op.create_table(
        'teachers',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('qualification', sa.String(length=150), nullable=True),
        sa.Column('experience', sa.Integer(), nullable=False),
        sa.Column('join_date', sa.Date(), nullable=True),
        sa.Column('classes', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint("status IN ('active','inactive')", name='ck_teacher_status'),
        sa.CheckConstraint('experience >= 0', name='ck_teacher_experience_positive'),
    )
    op.create_index('ix_teachers_name', 'teachers', ['name'])

    op.create_table(
        'subjects',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('level', sa.String(length=50), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('schedule', sa.JSON(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('active','inactive')", name='ck_subject_status'),
        sa.CheckConstraint('credits >= 0', name='ck_subject_credits_positive'),
    )
    op.create_index('ix_subjects_code', 'subjects', ['code'], unique=True)

    op.create_table(
        'student_subjects',
        sa.Column('student_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('student_id', 'subject_id'),
    )

    op.create_table(
        'teacher_subjects',
        sa.Column('teacher_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('teacher_id', 'subject_id'),
    )

    op.create_table(
        'class_subjects',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('class_name', sa.String(length=40), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('class_name', 'subject_id', name='uq_class_subject'),
    )
    op.create_index('ix_class_subjects_class_name', 'class_subjects', ['class_name'])

    op.create_table(
        'results',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('class_name', sa.String(length=40), nullable=False),
        sa.Column('session', sa.String(length=20), nullable=False),
        sa.Column('term', sa.String(length=50), nullable=False),
        sa.Column('ca', sa.Float(), nullable=False),
        sa.Column('test', sa.Float(), nullable=False),
        sa.Column('exam', sa.Float(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('percentage', sa.Integer(), nullable=False),
        sa.Column('grade', sa.String(length=5), nullable=False),
        sa.Column('remark', sa.String(length=255), nullable=True),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('total_class_score', sa.Float(), nullable=True),
        sa.Column('class_average', sa.Float(), nullable=True),
        sa.Column('percentile', sa.Integer(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.UniqueConstraint(
            'student_id', 'subject_id', 'class_name', 'session', 'term', name='uq_result_student_subject_period'
        ),
        sa.CheckConstraint('ca >= 0 AND test >= 0 AND exam >= 0', name='ck_result_scores_positive'),
    )
    op.create_index('ix_results_student_id', 'results', ['student_id'])
    op.create_index('ix_results_subject_id', 'results', ['subject_id'])
    op.create_index('ix_results_class_period', 'results', ['class_name', 'session', 'term'])

    op.create_table(
        'grading_policies',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('session', sa.String(length=20), nullable=True),
        sa.Column('term', sa.String(length=50), nullable=True),
        sa.Column('ca_max', sa.Float(), nullable=False),
        sa.Column('test_max', sa.Float(), nullable=False),
        sa.Column('exam_max', sa.Float(), nullable=False),
        sa.Column('total_max', sa.Float(), nullable=False),
        sa.Column('pass_mark', sa.Float(), nullable=False),
        sa.Column('scale', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session', 'term', name='uq_grading_policy_period'),
        sa.CheckConstraint('total_max > 0', name='ck_grading_policy_total_positive'),
    )

    op.create_table(
        'payment_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('mandatory', sa.Boolean(), nullable=False),
        sa.Column('term', sa.String(length=50), nullable=False),
        sa.Column('session', sa.String(length=20), nullable=False),
        sa.Column('classes', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='ck_payment_item_amount_positive'),
    )
    op.create_index('ix_payment_items_period', 'payment_items', ['session', 'term'])

    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('reference', sa.String(length=64), nullable=True),
        sa.Column('term', sa.String(length=50), nullable=True),
        sa.Column('session', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "status IN ('pending','paid','overdue','canceled','refunded')", name='ck_payment_status'
        ),
        sa.CheckConstraint(
            "payment_method IN ('cash','credit_card','bank_transfer','check','online','other')",
            name='ck_payment_method',
        ),
        sa.CheckConstraint('amount >= 0', name='ck_payment_amount_positive'),
    )
    op.create_index('ix_payments_student_id', 'payments', ['student_id'])
    op.create_index('ix_payments_status_due', 'payments', ['status', 'due_date'])

    op.create_table(
        'payment_lines',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('payment_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('item_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['payment_items.id'], ondelete='CASCADE'),
        sa.CheckConstraint("status IN ('paid','partial','unpaid')", name='ck_payment_line_status'),
        sa.CheckConstraint('paid_amount >= 0', name='ck_payment_line_paid_positive'),
    )
    op.create_index('ix_payment_lines_payment_id', 'payment_lines', ['payment_id'])
    op.create_index('ix_payment_lines_item_id', 'payment_lines', ['item_id'])

    op.create_table(
        'feeds',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('target_type', sa.String(length=16), nullable=False),
        sa.Column('target_ids', sa.JSON(), nullable=True),
        sa.Column('publish_date', sa.DateTime(), nullable=False),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.Column('is_pinned', sa.Boolean(), nullable=False),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint("target_type IN ('all','admin','teacher','student')", name='ck_feed_target_type'),
    )
    op.create_index('ix_feeds_publish_date', 'feeds', ['publish_date'])
    op.create_index('ix_feeds_author_id', 'feeds', ['author_id'])

    op.create_table(
        'feed_reads',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('feed_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['feed_id'], ['feeds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('feed_id', 'user_id', name='uq_feed_read_user'),
    )
    op.create_index('ix_feed_reads_user_id', 'feed_reads', ['user_id'])

    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('related_entity_type', sa.String(length=32), nullable=True),
        sa.Column('related_entity_id', sa.String(length=64), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint("type IN ('info','success','warning','error')", name='ck_notification_type'),
    )
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'is_read'])


def downgrade():
    op.drop_index('ix_notifications_user_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_feed_reads_user_id', table_name='feed_reads')
    op.drop_table('feed_reads')
    op.drop_index('ix_feeds_author_id', table_name='feeds')
    op.drop_index('ix_feeds_publish_date', table_name='feeds')
    op.drop_table('feeds')
    op.drop_index('ix_payment_lines_item_id', table_name='payment_lines')
    op.drop_index('ix_payment_lines_payment_id', table_name='payment_lines')
    op.drop_table('payment_lines')
    op.drop_index('ix_payments_status_due', table_name='payments')
    op.drop_index('ix_payments_student_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_payment_items_period', table_name='payment_items')
    op.drop_table('payment_items')
    op.drop_table('grading_policies')
    op.drop_index('ix_results_class_period', table_name='results')
    op.drop_index('ix_results_subject_id', table_name='results')
    op.drop_index('ix_results_student_id', table_name='results')
    op.drop_table('results')
    op.drop_index('ix_class_subjects_class_name', table_name='class_subjects')
    op.drop_table('class_subjects')
    op.drop_table('teacher_subjects')
    op.drop_table('student_subjects')
    op.drop_index('ix_subjects_code', table_name='subjects')
    op.drop_table('subjects')
    op.drop_index('ix_teachers_name', table_name='teachers')
    op.drop_table('teachers')
    op.drop_index('ix_students_class_name', table_name='students')
    op.drop_index('ix_students_name', table_name='students')
    op.drop_table('students')
    op.drop_index('ix_users_linked_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
