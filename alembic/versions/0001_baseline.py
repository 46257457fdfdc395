"""Baseline migration - tenants, events, photos, face matching, billing mirror, consent

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-16

Every cascade / set-null rule lives on the foreign keys so the database
enforces it, not application code.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()

    # ==========================================================================
    # Tenants and users
    # ==========================================================================
    op.execute('''
        CREATE TABLE organizations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            stripe_customer_id VARCHAR(255) UNIQUE,
            subscription_status VARCHAR(30),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            display_name VARCHAR(255),
            role VARCHAR(30) NOT NULL DEFAULT 'INDIVIDUAL_USER',
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            token_version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_users_role_valid CHECK (role IN (
                'ORGANIZATION_ADMIN', 'ORGANIZATION_EDITOR', 'ORGANIZATION_VIEWER', 'INDIVIDUAL_USER'
            ))
        )
    ''')

    op.execute('''
        CREATE TABLE organization_users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_organization_users_user_org UNIQUE (user_id, org_id)
        )
    ''')
    op.execute('CREATE INDEX idx_organization_users_org_id ON organization_users(org_id)')

    # ==========================================================================
    # Events
    # ==========================================================================
    op.execute('''
        CREATE TABLE event_categories (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            name VARCHAR(100) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_event_categories_org_name UNIQUE (org_id, name)
        )
    ''')

    op.execute('''
        CREATE TABLE events (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            category_id UUID REFERENCES event_categories(id) ON DELETE SET NULL,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            date_start TIMESTAMPTZ NOT NULL,
            date_end TIMESTAMPTZ,
            location_name VARCHAR(255),
            location_address VARCHAR(500),
            status VARCHAR(20) NOT NULL DEFAULT 'DRAFT',
            is_public BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_events_status_valid CHECK (status IN (
                'DRAFT', 'UPCOMING', 'ACTIVE', 'COMPLETED', 'ARCHIVED'
            )),
            CONSTRAINT ck_events_date_range CHECK (date_end IS NULL OR date_end >= date_start)
        )
    ''')
    op.execute('CREATE INDEX idx_events_org_date_start ON events(org_id, date_start)')

    op.execute('''
        CREATE TABLE participants (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            event_id UUID NOT NULL REFERENCES events(id) ON DELETE CASCADE,
            user_id UUID REFERENCES users(id) ON DELETE SET NULL,
            name VARCHAR(255) NOT NULL,
            email VARCHAR(320) NOT NULL,
            registration_status VARCHAR(50) NOT NULL DEFAULT 'Invited',
            consent_status BOOLEAN NOT NULL DEFAULT FALSE,
            reference_photo_url VARCHAR(1024),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_participants_event_email UNIQUE (event_id, email)
        )
    ''')
    op.execute('CREATE INDEX idx_participants_user_id ON participants(user_id)')

    # ==========================================================================
    # Photos and face matching
    # ==========================================================================
    op.execute('''
        CREATE TABLE event_photos (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            event_id UUID NOT NULL REFERENCES events(id) ON DELETE CASCADE,
            uploader_user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            image_url VARCHAR(1024) NOT NULL,
            thumbnail_url VARCHAR(1024),
            upload_time TIMESTAMPTZ NOT NULL DEFAULT now(),
            review_status VARCHAR(20) NOT NULL DEFAULT 'PENDING',
            is_public BOOLEAN NOT NULL DEFAULT FALSE,
            metadata JSON,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_event_photos_review_status_valid CHECK (review_status IN (
                'PENDING', 'APPROVED', 'REJECTED'
            ))
        )
    ''')
    op.execute('CREATE INDEX idx_event_photos_event_upload_time ON event_photos(event_id, upload_time)')
    op.execute('CREATE INDEX idx_event_photos_uploader ON event_photos(uploader_user_id)')

    op.execute('''
        CREATE TABLE detected_faces (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            photo_id UUID NOT NULL REFERENCES event_photos(id) ON DELETE CASCADE,
            box_x DOUBLE PRECISION NOT NULL,
            box_y DOUBLE PRECISION NOT NULL,
            box_width DOUBLE PRECISION NOT NULL,
            box_height DOUBLE PRECISION NOT NULL,
            descriptor BYTEA,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_detected_faces_photo_id ON detected_faces(photo_id)')

    op.execute('''
        CREATE TABLE photo_participant_matches (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            photo_id UUID NOT NULL REFERENCES event_photos(id) ON DELETE CASCADE,
            participant_id UUID NOT NULL REFERENCES participants(id) ON DELETE CASCADE,
            confidence DOUBLE PRECISION NOT NULL,
            matched_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_photo_participant_match UNIQUE (photo_id, participant_id)
        )
    ''')
    op.execute(
        'CREATE INDEX idx_photo_participant_matches_participant '
        'ON photo_participant_matches(participant_id)'
    )

    op.execute('''
        CREATE TABLE face_matching_tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            event_id UUID NOT NULL REFERENCES events(id) ON DELETE CASCADE,
            requested_by_user_id UUID REFERENCES users(id) ON DELETE SET NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'PENDING',
            started_at TIMESTAMPTZ,
            completed_at TIMESTAMPTZ,
            external_job_id VARCHAR(255),
            error_message TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_face_matching_tasks_status_valid CHECK (status IN (
                'PENDING', 'PROCESSING', 'COMPLETED', 'FAILED'
            ))
        )
    ''')
    op.execute('CREATE INDEX idx_face_matching_tasks_event ON face_matching_tasks(event_id, created_at)')

    # ==========================================================================
    # Billing mirror
    # ==========================================================================
    op.execute('''
        CREATE TABLE subscription_plans (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            stripe_price_id VARCHAR(255) UNIQUE NOT NULL,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            features JSON NOT NULL DEFAULT '[]',
            price INTEGER NOT NULL,
            currency VARCHAR(3) NOT NULL,
            interval VARCHAR(10) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE subscriptions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            plan_id UUID NOT NULL REFERENCES subscription_plans(id) ON DELETE RESTRICT,
            stripe_subscription_id VARCHAR(255) UNIQUE NOT NULL,
            status VARCHAR(30) NOT NULL,
            current_period_start TIMESTAMPTZ,
            current_period_end TIMESTAMPTZ,
            cancel_at_period_end BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_subscriptions_org_id ON subscriptions(org_id)')

    op.execute('''
        CREATE TABLE invoices (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            stripe_invoice_id VARCHAR(255) UNIQUE NOT NULL,
            amount_due INTEGER NOT NULL,
            amount_paid INTEGER NOT NULL DEFAULT 0,
            currency VARCHAR(3) NOT NULL,
            status VARCHAR(30) NOT NULL,
            invoice_pdf_url VARCHAR(1024),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_invoices_org_id ON invoices(org_id)')

    op.execute('''
        CREATE TABLE payments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            subscription_id UUID REFERENCES subscriptions(id) ON DELETE SET NULL,
            invoice_id UUID REFERENCES invoices(id) ON DELETE SET NULL,
            stripe_charge_id VARCHAR(255) UNIQUE NOT NULL,
            amount INTEGER NOT NULL,
            currency VARCHAR(3) NOT NULL,
            status VARCHAR(20) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_payments_org_id ON payments(org_id)')

    # ==========================================================================
    # Consent audit trail (rows outlive the event/participant they mention)
    # ==========================================================================
    op.execute('''
        CREATE TABLE consent_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            event_id UUID REFERENCES events(id) ON DELETE SET NULL,
            participant_id UUID REFERENCES participants(id) ON DELETE SET NULL,
            consent_type VARCHAR(30) NOT NULL,
            action VARCHAR(10) NOT NULL,
            timestamp TIMESTAMPTZ NOT NULL DEFAULT now(),
            details TEXT,
            CONSTRAINT ck_consent_logs_type_valid CHECK (consent_type IN (
                'PHOTO_STORAGE', 'FACIAL_RECOGNITION', 'DATA_SHARING'
            )),
            CONSTRAINT ck_consent_logs_action_valid CHECK (action IN ('GRANTED', 'REVOKED'))
        )
    ''')
    op.execute('CREATE INDEX idx_consent_logs_user_timestamp ON consent_logs(user_id, timestamp)')
    op.execute('CREATE INDEX idx_consent_logs_event_id ON consent_logs(event_id)')


def downgrade() -> None:
    """Drop all tables (children first)."""
    for table in (
        'consent_logs',
        'payments',
        'invoices',
        'subscriptions',
        'subscription_plans',
        'face_matching_tasks',
        'photo_participant_matches',
        'detected_faces',
        'event_photos',
        'participants',
        'events',
        'event_categories',
        'organization_users',
        'users',
        'organizations',
    ):
        op.execute(f'DROP TABLE IF EXISTS {table}')
