"""Create scholarship portal tables

Revision ID: 3c1f9a7d2b64
Revises:
Create Date: 2026-10-17 09:12:41.118204
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('preferred_name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='applicant'),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('linkedin_url', sa.String(length=500), nullable=True),
        sa.Column('website_url', sa.String(length=500), nullable=True),
        sa.Column('notification_preferences', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'scholarships',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('extended_description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('eligibility_criteria', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('custom_fields', sa.JSON(), nullable=True),
        sa.Column('form_schema', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive', 'closed')", name='ck_scholarships_status'),
    )
    op.create_index('ix_scholarships_id', 'scholarships', ['id'])

    op.create_table(
        'applications',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('scholarship_id', sa.String(length=36), sa.ForeignKey('scholarships.id', ondelete='CASCADE'), nullable=False),
        sa.Column('applicant_id', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('submission_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('zip', sa.String(length=20), nullable=True),
        sa.Column('date_of_birth', sa.String(length=20), nullable=True),
        sa.Column('school', sa.String(length=255), nullable=True),
        sa.Column('graduation_year', sa.Integer(), nullable=True),
        sa.Column('gpa', sa.Numeric(3, 2), nullable=True),
        sa.Column('major', sa.String(length=255), nullable=True),
        sa.Column('academic_level', sa.String(length=30), nullable=True),
        sa.Column('career_goals', sa.Text(), nullable=True),
        sa.Column('financial_need', sa.Text(), nullable=True),
        sa.Column('community_involvement', sa.Text(), nullable=True),
        sa.Column('why_deserve_scholarship', sa.Text(), nullable=True),
        sa.Column('work_experience', sa.Text(), nullable=True),
        sa.Column('extracurricular_activities', sa.Text(), nullable=True),
        sa.Column('awards_and_honors', sa.Text(), nullable=True),
        sa.Column('custom_responses', sa.JSON(), nullable=True),
        sa.Column('awarded_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('awarded_date', sa.Date(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('scholarship_id', 'applicant_id', name='uq_applications_scholarship_applicant'),
        sa.CheckConstraint(
            "status IN ('draft', 'submitted', 'under_review', 'approved', 'rejected', 'awarded')",
            name='ck_applications_status',
        ),
        sa.CheckConstraint('gpa IS NULL OR (gpa >= 0 AND gpa <= 4)', name='ck_applications_gpa_range'),
    )
    op.create_index('ix_applications_id', 'applications', ['id'])
    op.create_index('ix_applications_scholarship_id', 'applications', ['scholarship_id'])
    op.create_index('ix_applications_applicant_id', 'applications', ['applicant_id'])
    op.create_index('ix_applications_email', 'applications', ['email'])

    op.create_table(
        'application_documents',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('application_id', sa.String(length=36), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('field_name', sa.String(length=100), nullable=False),
        sa.Column('file_url', sa.String(length=500), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_application_documents_application_id', 'application_documents', ['application_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('event_type', sa.String(length=30), nullable=False, server_default='other'),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_registrations', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('registration_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_events_id', 'events', ['id'])

    op.create_table(
        'event_registrations',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('event_id', sa.String(length=36), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('registration_status', sa.String(length=20), nullable=False, server_default='registered'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('registration_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_registrations_event_user'),
    )
    op.create_index('ix_event_registrations_event_id', 'event_registrations', ['event_id'])
    op.create_index('ix_event_registrations_user_id', 'event_registrations', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('event_registrations')
    op.drop_table('events')
    op.drop_table('application_documents')
    op.drop_table('applications')
    op.drop_table('scholarships')
    op.drop_table('profiles')
