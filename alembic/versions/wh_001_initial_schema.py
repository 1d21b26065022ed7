"""Create civic complaint star schema

Revision ID: wh_001
Revises:
Create Date: 2026-10-17

Tables added:
- dim_report_type, dim_visibility, dim_status, dim_actor_role
- dim_reporter, dim_authority, dim_city
- fact_reports, bridge_report_reporter
- fact_status_events, fact_media_events, fact_vote_events, fact_escalation_events
- etl_batch_run
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from civic_warehouse.config import settings

# revision identifiers, used by Alembic.
revision = 'wh_001'
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = settings.warehouse_db_schema


def _enum_dimension(table_name: str, key: str) -> None:
    op.create_table(
        table_name,
        sa.Column(key, sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint(key),
        sa.UniqueConstraint('name', name=f'uq_{table_name}_name'),
        schema=SCHEMA
    )


def upgrade() -> None:
    # Closed enumerations
    _enum_dimension('dim_report_type', 'report_type_id')
    _enum_dimension('dim_visibility', 'visibility_id')
    _enum_dimension('dim_status', 'status_id')
    _enum_dimension('dim_actor_role', 'actor_role_id')

    # dim_reporter
    op.create_table(
        'dim_reporter',
        sa.Column('reporter_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('loaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('reporter_id'),
        schema=SCHEMA
    )

    # dim_authority
    op.create_table(
        'dim_authority',
        sa.Column('authority_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('agency', sa.String(255), nullable=False),
        sa.Column('unit', sa.String(255), nullable=True),
        sa.Column('officer_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('loaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('authority_id'),
        sa.UniqueConstraint('agency', name='uq_dim_authority_agency'),
        schema=SCHEMA
    )

    # dim_city
    op.create_table(
        'dim_city',
        sa.Column('city_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('province', sa.String(255), nullable=False),
        sa.Column('center_lat', sa.Double(), nullable=False),
        sa.Column('center_lng', sa.Double(), nullable=False),
        sa.PrimaryKeyConstraint('city_id'),
        sa.UniqueConstraint('name', name='uq_dim_city_name'),
        schema=SCHEMA
    )

    # fact_reports
    op.create_table(
        'fact_reports',
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('report_type_id', sa.Integer(), nullable=False),
        sa.Column('visibility_id', sa.Integer(), nullable=False),
        sa.Column('current_status_id', sa.Integer(), nullable=False),
        sa.Column('authority_id', sa.Integer(), nullable=True),
        sa.Column('city_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Double(), nullable=True),
        sa.Column('longitude', sa.Double(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('upvote_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_escalated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('loaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('report_id'),
        sa.ForeignKeyConstraint(['report_type_id'], [f'{SCHEMA}.dim_report_type.report_type_id']),
        sa.ForeignKeyConstraint(['visibility_id'], [f'{SCHEMA}.dim_visibility.visibility_id']),
        sa.ForeignKeyConstraint(['current_status_id'], [f'{SCHEMA}.dim_status.status_id']),
        sa.ForeignKeyConstraint(['authority_id'], [f'{SCHEMA}.dim_authority.authority_id']),
        sa.ForeignKeyConstraint(['city_id'], [f'{SCHEMA}.dim_city.city_id']),
        schema=SCHEMA
    )
    op.create_index('ix_fact_reports_created_at', 'fact_reports', ['created_at'], schema=SCHEMA)

    # bridge_report_reporter
    op.create_table(
        'bridge_report_reporter',
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('reporter_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint('report_id', 'reporter_id'),
        sa.ForeignKeyConstraint(['report_id'], [f'{SCHEMA}.fact_reports.report_id']),
        sa.ForeignKeyConstraint(['reporter_id'], [f'{SCHEMA}.dim_reporter.reporter_id']),
        schema=SCHEMA
    )

    # fact_status_events
    op.create_table(
        'fact_status_events',
        sa.Column('status_event_id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('actor_role_id', sa.Integer(), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('event_timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('event_key', sa.String(255), nullable=True),
        sa.Column('loaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('status_event_id'),
        sa.ForeignKeyConstraint(['report_id'], [f'{SCHEMA}.fact_reports.report_id']),
        sa.ForeignKeyConstraint(['status_id'], [f'{SCHEMA}.dim_status.status_id']),
        sa.ForeignKeyConstraint(['actor_role_id'], [f'{SCHEMA}.dim_actor_role.actor_role_id']),
        sa.UniqueConstraint('event_key', name='uq_fact_status_events_event_key'),
        schema=SCHEMA
    )
    op.create_index('ix_fact_status_events_report_id', 'fact_status_events', ['report_id'], schema=SCHEMA)

    # fact_media_events
    op.create_table(
        'fact_media_events',
        sa.Column('media_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('media_type', sa.String(50), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('media_id'),
        sa.ForeignKeyConstraint(['report_id'], [f'{SCHEMA}.fact_reports.report_id']),
        schema=SCHEMA
    )
    op.create_index('ix_fact_media_events_report_id', 'fact_media_events', ['report_id'], schema=SCHEMA)

    # fact_vote_events
    op.create_table(
        'fact_vote_events',
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('voter_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('voted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('report_id', 'voter_id'),
        sa.ForeignKeyConstraint(['report_id'], [f'{SCHEMA}.fact_reports.report_id']),
        schema=SCHEMA
    )

    # fact_escalation_events
    op.create_table(
        'fact_escalation_events',
        sa.Column('escalation_event_id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('report_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('escalated_to', sa.Text(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('escalated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('event_key', sa.String(255), nullable=True),
        sa.Column('loaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('escalation_event_id'),
        sa.ForeignKeyConstraint(['report_id'], [f'{SCHEMA}.fact_reports.report_id']),
        sa.UniqueConstraint('event_key', name='uq_fact_escalation_events_event_key'),
        schema=SCHEMA
    )
    op.create_index('ix_fact_escalation_events_report_id', 'fact_escalation_events', ['report_id'], schema=SCHEMA)

    # etl_batch_run
    op.create_table(
        'etl_batch_run',
        sa.Column('batch_run_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('processed_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('failed_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('batch_run_id'),
        schema=SCHEMA
    )


def downgrade() -> None:
    op.drop_table('etl_batch_run', schema=SCHEMA)
    op.drop_index('ix_fact_escalation_events_report_id', table_name='fact_escalation_events', schema=SCHEMA)
    op.drop_table('fact_escalation_events', schema=SCHEMA)
    op.drop_table('fact_vote_events', schema=SCHEMA)
    op.drop_index('ix_fact_media_events_report_id', table_name='fact_media_events', schema=SCHEMA)
    op.drop_table('fact_media_events', schema=SCHEMA)
    op.drop_index('ix_fact_status_events_report_id', table_name='fact_status_events', schema=SCHEMA)
    op.drop_table('fact_status_events', schema=SCHEMA)
    op.drop_table('bridge_report_reporter', schema=SCHEMA)
    op.drop_index('ix_fact_reports_created_at', table_name='fact_reports', schema=SCHEMA)
    op.drop_table('fact_reports', schema=SCHEMA)
    op.drop_table('dim_city', schema=SCHEMA)
    op.drop_table('dim_authority', schema=SCHEMA)
    op.drop_table('dim_reporter', schema=SCHEMA)
    op.drop_table('dim_actor_role', schema=SCHEMA)
    op.drop_table('dim_status', schema=SCHEMA)
    op.drop_table('dim_visibility', schema=SCHEMA)
    op.drop_table('dim_report_type', schema=SCHEMA)
