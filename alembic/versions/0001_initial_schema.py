"""initial schema for cities, users, classes, registrations and attendance

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_gender = sa.Enum('male', 'female', 'non-binary', 'prefer not to say', name='user_gender')
user_role = sa.Enum('student', 'admin', name='user_role')
class_type = sa.Enum('one-time', 'ongoing', name='class_type')
target_gender = sa.Enum('any', 'male', 'female', name='target_gender')
registration_type = sa.Enum('internal', 'external', name='registration_type')
registration_status = sa.Enum('enrolled', 'waitlisted', 'cancelled_by_user', 'cancelled_by_admin', name='registration_status')
attendance_status = sa.Enum('present', 'absent', 'late', name='attendance_status')


def _timestamps():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'cities',
        *_timestamps(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cities_id', 'cities', ['id'])
    op.create_index('ix_cities_created_at', 'cities', ['created_at'])
    op.create_index('ix_cities_name', 'cities', ['name'], unique=True)

    op.create_table(
        'users',
        *_timestamps(),
        sa.Column('city_id', sa.Uuid(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('gender', user_gender, nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.ForeignKeyConstraint(['city_id'], ['cities.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])
    op.create_index('ix_users_city_id', 'users', ['city_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'classes',
        *_timestamps(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', class_type, nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=300), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('instructor_name', sa.String(length=150), nullable=False),
        sa.Column('instructor_bio', sa.Text(), nullable=True),
        sa.Column('target_gender', target_gender, nullable=False),
        sa.Column('age_min', sa.Integer(), nullable=False),
        sa.Column('age_max', sa.Integer(), nullable=True),
        sa.Column('schedule', sa.JSON(), nullable=False),
        sa.Column('registration_type', registration_type, nullable=False),
        sa.Column('external_link', sa.String(length=500), nullable=True),
        sa.CheckConstraint('capacity > 0', name='ck_classes_capacity_positive'),
        sa.CheckConstraint('cost >= 0', name='ck_classes_cost_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_classes_id', 'classes', ['id'])
    op.create_index('ix_classes_created_at', 'classes', ['created_at'])
    op.create_index('ix_classes_city', 'classes', ['city'])

    op.create_table(
        'registrations',
        *_timestamps(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('registration_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', registration_status, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'class_id', name='uq_registration_user_class'),
    )
    op.create_index('ix_registrations_id', 'registrations', ['id'])
    op.create_index('ix_registrations_created_at', 'registrations', ['created_at'])
    op.create_index('ix_registrations_user_id', 'registrations', ['user_id'])
    op.create_index('ix_registrations_class_id', 'registrations', ['class_id'])
    op.create_index('ix_registrations_registration_date', 'registrations', ['registration_date'])
    op.create_index('ix_registrations_status', 'registrations', ['status'])

    op.create_table(
        'attendance_records',
        *_timestamps(),
        sa.Column('class_id', sa.Uuid(), nullable=False),
        sa.Column('session_date', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_id', 'session_date', name='uq_attendance_class_session'),
    )
    op.create_index('ix_attendance_records_id', 'attendance_records', ['id'])
    op.create_index('ix_attendance_records_created_at', 'attendance_records', ['created_at'])
    op.create_index('ix_attendance_records_class_id', 'attendance_records', ['class_id'])
    op.create_index('ix_attendance_records_session_date', 'attendance_records', ['session_date'])

    op.create_table(
        'attendance_entries',
        *_timestamps(),
        sa.Column('attendance_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', attendance_status, nullable=False),
        sa.ForeignKeyConstraint(['attendance_id'], ['attendance_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('attendance_id', 'student_id', name='uq_attendance_entry_student'),
    )
    op.create_index('ix_attendance_entries_id', 'attendance_entries', ['id'])
    op.create_index('ix_attendance_entries_created_at', 'attendance_entries', ['created_at'])
    op.create_index('ix_attendance_entries_attendance_id', 'attendance_entries', ['attendance_id'])
    op.create_index('ix_attendance_entries_student_id', 'attendance_entries', ['student_id'])


def downgrade() -> None:
    op.drop_table('attendance_entries')
    op.drop_table('attendance_records')
    op.drop_table('registrations')
    op.drop_table('classes')
    op.drop_table('users')
    op.drop_table('cities')

    bind = op.get_bind()
    for enum_type in (attendance_status, registration_status, registration_type,
                      target_gender, class_type, user_role, user_gender):
        enum_type.drop(bind, checkfirst=True)
