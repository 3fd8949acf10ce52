"""baseline_schema

Revision ID: a1f0c2d3e4b5
Revises: 
Create Date: 2026-10-18 09:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a1f0c2d3e4b5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON(none_as_null=True).with_variant(postgresql.JSONB(none_as_null=True), 'postgresql')


def upgrade() -> None:
    """Create tenant, branding, domain, lead and provisioning tables."""

    # Customers table (must be first due to FK dependencies)
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_name', sa.String(length=255), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=False),
        sa.Column('owner_email', sa.String(length=255), nullable=False),
        sa.Column('owner_phone', sa.String(length=50), nullable=True),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('tier', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('stripe_customer_id', sa.String(length=64), nullable=True),
        sa.Column('subscription_id', sa.String(length=64), nullable=True),
        sa.Column('setup_fee_paid', sa.Integer(), nullable=False),
        sa.Column('monthly_fee', sa.Integer(), nullable=False),
        sa.Column('trial_ends_at', sa.DateTime(), nullable=True),
        sa.Column('api_key', sa.String(length=64), nullable=False),
        sa.Column('api_key_created_at', sa.DateTime(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_customers_owner_email'), 'customers', ['owner_email'], unique=True)
    op.create_index(op.f('ix_customers_api_key'), 'customers', ['api_key'], unique=True)
    op.create_index(op.f('ix_customers_status'), 'customers', ['status'], unique=False)
    op.create_index(op.f('ix_customers_stripe_customer_id'), 'customers', ['stripe_customer_id'], unique=False)
    op.create_index(op.f('ix_customers_subscription_id'), 'customers', ['subscription_id'], unique=False)

    # White-label configs (one per customer)
    op.create_table(
        'white_label_configs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('primary_color', sa.String(length=32), nullable=True),
        sa.Column('secondary_color', sa.String(length=32), nullable=True),
        sa.Column('accent_color', sa.String(length=32), nullable=True),
        sa.Column('logo_url', sa.String(length=512), nullable=True),
        sa.Column('firm_address', sa.Text(), nullable=True),
        sa.Column('firm_website', sa.String(length=255), nullable=True),
        sa.Column('firm_phone', sa.String(length=50), nullable=True),
        sa.Column('firm_description', sa.Text(), nullable=True),
        sa.Column('hero_title', sa.String(length=255), nullable=True),
        sa.Column('hero_subtitle', sa.Text(), nullable=True),
        sa.Column('about_content', sa.Text(), nullable=True),
        sa.Column('services_content', sa.Text(), nullable=True),
        sa.Column('features_enabled', JSONType, nullable=False),
        sa.Column('from_email', sa.String(length=255), nullable=True),
        sa.Column('reply_to_email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('customer_id')
    )

    # Customer domains
    op.create_table(
        'customer_domains',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.Column('verification_status', sa.String(length=16), nullable=False),
        sa.Column('verification_token', sa.String(length=64), nullable=False),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('last_checked_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_customer_domains_customer_id'), 'customer_domains', ['customer_id'], unique=False)
    op.create_index(op.f('ix_customer_domains_domain'), 'customer_domains', ['domain'], unique=True)
    op.create_index(op.f('ix_customer_domains_verification_status'), 'customer_domains',
                    ['verification_status'], unique=False)
    op.create_index(
        'uq_customer_domains_primary', 'customer_domains', ['customer_id'], unique=True,
        sqlite_where=sa.text('is_primary = 1'),
        postgresql_where=sa.text('is_primary'),
    )

    # Client leads
    op.create_table(
        'client_leads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('client_email', sa.String(length=255), nullable=False),
        sa.Column('client_phone', sa.String(length=50), nullable=True),
        sa.Column('assessment_data', JSONType, nullable=True),
        sa.Column('risk_score', sa.Integer(), nullable=True),
        sa.Column('risk_level', sa.String(length=16), nullable=False),
        sa.Column('source_domain', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.Column('utm_source', sa.String(length=255), nullable=True),
        sa.Column('utm_medium', sa.String(length=255), nullable=True),
        sa.Column('utm_campaign', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_client_leads_customer_id'), 'client_leads', ['customer_id'], unique=False)
    op.create_index(op.f('ix_client_leads_status'), 'client_leads', ['status'], unique=False)
    op.create_index('ix_client_leads_customer_created', 'client_leads', ['customer_id', 'created_at'], unique=False)

    # Activity logs
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('details', JSONType, nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_logs_customer_id'), 'activity_logs', ['customer_id'], unique=False)
    op.create_index(op.f('ix_activity_logs_action'), 'activity_logs', ['action'], unique=False)
    op.create_index(op.f('ix_activity_logs_created_at'), 'activity_logs', ['created_at'], unique=False)

    # Offices
    op.create_table(
        'offices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('is_headquarters', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_offices_customer_id'), 'offices', ['customer_id'], unique=False)

    # Document templates
    op.create_table(
        'document_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('template_type', sa.String(length=32), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('variables', JSONType, nullable=False),
        sa.Column('jurisdiction', sa.String(length=16), nullable=False),
        sa.Column('language', sa.String(length=8), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_document_templates_customer_id'), 'document_templates', ['customer_id'], unique=False)

    # Provisioning runs
    op.create_table(
        'provisioning_runs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stripe_event_id', sa.String(length=255), nullable=True),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('owner_email', sa.String(length=255), nullable=False),
        sa.Column('tier', sa.String(length=32), nullable=False),
        sa.Column('request_data', JSONType, nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('failed_step', sa.String(length=32), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_provisioning_runs_stripe_event_id'), 'provisioning_runs', ['stripe_event_id'], unique=True)
    op.create_index(op.f('ix_provisioning_runs_customer_id'), 'provisioning_runs', ['customer_id'], unique=False)
    op.create_index(op.f('ix_provisioning_runs_status'), 'provisioning_runs', ['status'], unique=False)


def downgrade() -> None:
    """Drop all tables (reverse FK order)."""
    op.drop_table('provisioning_runs')
    op.drop_table('document_templates')
    op.drop_table('offices')
    op.drop_table('activity_logs')
    op.drop_table('client_leads')
    op.drop_index('uq_customer_domains_primary', table_name='customer_domains')
    op.drop_table('customer_domains')
    op.drop_table('white_label_configs')
    op.drop_table('customers')
