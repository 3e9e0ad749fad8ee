"""initial schema

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b10'
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
        'profiles',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('full_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('role', sa.Enum('SUPER_ADMIN', 'DRIVER', name='profilerole'), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('hashed_password', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)

    op.create_table(
        'clients',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('siret', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('tracking_token', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_clients_name'), 'clients', ['name'], unique=False)
    op.create_index(op.f('ix_clients_siret'), 'clients', ['siret'], unique=False)
    op.create_index(op.f('ix_clients_tracking_token'), 'clients', ['tracking_token'], unique=True)

    op.create_table(
        'tracking_tokens',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('token', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tracking_tokens_client_id'), 'tracking_tokens', ['client_id'], unique=False)
    op.create_index(op.f('ix_tracking_tokens_token'), 'tracking_tokens', ['token'], unique=True)

    op.create_table(
        'collection_sites',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_collection_sites_client_id'), 'collection_sites', ['client_id'], unique=False)

    op.create_table(
        'deposit_sites',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'vehicles',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('license_plate', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('vehicle_type', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_vehicles_license_plate'), 'vehicles', ['license_plate'], unique=True)

    op.create_table(
        'material_types',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_material_types_name'), 'material_types', ['name'], unique=True)

    op.create_table(
        'missions',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('driver_id', sa.Uuid(), nullable=False),
        sa.Column('collection_site_id', sa.Uuid(), nullable=False),
        sa.Column('deposit_site_id', sa.Uuid(), nullable=False),
        sa.Column('vehicle_id', sa.Uuid(), nullable=False),
        sa.Column('material_type_id', sa.Uuid(), nullable=False),
        sa.Column('mission_date', sa.Date(), nullable=False),
        sa.Column('empty_weight_kg', sa.Float(), nullable=False),
        sa.Column('loaded_weight_kg', sa.Float(), nullable=False),
        sa.Column('net_weight_tons', sa.Float(), nullable=False),
        sa.Column('driver_comment', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('order_number', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('mission_request_id', sa.Uuid(), nullable=True),
        sa.Column('external_request_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('client_request_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('DRAFT', 'COMPLETED', 'VALIDATED', name='missionstatus'), nullable=False),
        sa.Column('validated_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['driver_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['collection_site_id'], ['collection_sites.id']),
        sa.ForeignKeyConstraint(['deposit_site_id'], ['deposit_sites.id']),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
        sa.ForeignKeyConstraint(['material_type_id'], ['material_types.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('mission_request_id'),
    )
    op.create_index(op.f('ix_missions_client_id'), 'missions', ['client_id'], unique=False)
    op.create_index(op.f('ix_missions_driver_id'), 'missions', ['driver_id'], unique=False)
    op.create_index(op.f('ix_missions_mission_date'), 'missions', ['mission_date'], unique=False)
    op.create_index(op.f('ix_missions_status'), 'missions', ['status'], unique=False)

    op.create_table(
        'mission_requests',
        *_timestamps(),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('collection_site_id', sa.Uuid(), nullable=False),
        sa.Column('estimated_weight_tons', sa.Float(), nullable=False),
        sa.Column('external_request_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('client_request_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'VIEWED', 'CONVERTED', name='missionrequeststatus'), nullable=False),
        sa.Column('viewed_by_admin_at', sa.DateTime(), nullable=True),
        sa.Column('viewed_by_driver_at', sa.DateTime(), nullable=True),
        sa.Column('converted_at', sa.DateTime(), nullable=True),
        sa.Column('mission_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['collection_site_id'], ['collection_sites.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_mission_requests_client_id'), 'mission_requests', ['client_id'], unique=False)
    op.create_index(op.f('ix_mission_requests_status'), 'mission_requests', ['status'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('entity_type', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.Enum('CREATE', 'UPDATE', 'DELETE', name='auditaction'), nullable=False),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('ip_address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_actor_id'), 'audit_logs', ['actor_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_entity_type'), 'audit_logs', ['entity_type'], unique=False)
    op.create_index(op.f('ix_audit_logs_entity_id'), 'audit_logs', ['entity_id'], unique=False)


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('mission_requests')
    op.drop_table('missions')
    op.drop_table('material_types')
    op.drop_table('vehicles')
    op.drop_table('deposit_sites')
    op.drop_table('collection_sites')
    op.drop_table('tracking_tokens')
    op.drop_table('clients')
    op.drop_table('profiles')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('auditaction', 'missionrequeststatus', 'missionstatus', 'profilerole'):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
