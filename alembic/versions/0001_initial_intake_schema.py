"""initial_intake_schema

Revision ID: 0001_initial_intake_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_intake_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'buildings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('whatsapp_number', sa.String(length=50), nullable=True),
        sa.Column('sms_number', sa.String(length=50), nullable=True),
        sa.Column('preferred_language', sa.String(length=5), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_buildings_id'), 'buildings', ['id'], unique=False)
    op.create_index(op.f('ix_buildings_whatsapp_number'), 'buildings', ['whatsapp_number'], unique=True)
    op.create_index(op.f('ix_buildings_sms_number'), 'buildings', ['sms_number'], unique=True)

    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('unit_number', sa.String(length=50), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('current_renter_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_units_id'), 'units', ['id'], unique=False)
    op.create_index(op.f('ix_units_building_id'), 'units', ['building_id'], unique=False)

    op.create_table(
        'residents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('whatsapp_number', sa.String(length=50), nullable=True),
        sa.Column('opted_in_whatsapp', sa.Boolean(), nullable=False),
        sa.Column('opted_in_sms', sa.Boolean(), nullable=False),
        sa.Column('preferred_language', sa.String(length=5), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_residents_id'), 'residents', ['id'], unique=False)
    op.create_index(op.f('ix_residents_building_id'), 'residents', ['building_id'], unique=False)
    op.create_index(op.f('ix_residents_unit_id'), 'residents', ['unit_id'], unique=False)
    op.create_index(op.f('ix_residents_phone'), 'residents', ['phone'], unique=False)
    op.create_index(op.f('ix_residents_whatsapp_number'), 'residents', ['whatsapp_number'], unique=False)

    # Units and residents reference each other
    op.create_foreign_key('fk_units_owner_id', 'units', 'residents', ['owner_id'], ['id'])
    op.create_foreign_key('fk_units_current_renter_id', 'units', 'residents', ['current_renter_id'], ['id'])

    op.create_table(
        'admin_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('notification_email', sa.String(length=255), nullable=True),
        sa.Column('notification_phone', sa.String(length=50), nullable=True),
        sa.Column('notification_preferences', sa.JSON(), nullable=True),
        sa.Column('language', sa.String(length=5), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_admin_profiles_id'), 'admin_profiles', ['id'], unique=False)

    op.create_table(
        'building_admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('admin_profile_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.ForeignKeyConstraint(['admin_profile_id'], ['admin_profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('building_id', 'admin_profile_id', name='uq_building_admins_member'),
    )
    op.create_index(op.f('ix_building_admins_id'), 'building_admins', ['id'], unique=False)
    op.create_index(op.f('ix_building_admins_building_id'), 'building_admins', ['building_id'], unique=False)
    op.create_index(op.f('ix_building_admins_admin_profile_id'), 'building_admins', ['admin_profile_id'], unique=False)

    op.create_table(
        'knowledge_base',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_knowledge_base_id'), 'knowledge_base', ['id'], unique=False)
    op.create_index(op.f('ix_knowledge_base_building_id'), 'knowledge_base', ['building_id'], unique=False)

    op.create_table(
        'conversations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('resident_id', sa.Integer(), nullable=False),
        sa.Column('channel', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('last_message_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.ForeignKeyConstraint(['resident_id'], ['residents.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_conversations_id'), 'conversations', ['id'], unique=False)
    op.create_index(op.f('ix_conversations_building_id'), 'conversations', ['building_id'], unique=False)
    op.create_index(op.f('ix_conversations_resident_id'), 'conversations', ['resident_id'], unique=False)
    op.create_index(
        'uq_conversations_active_triple',
        'conversations',
        ['building_id', 'resident_id', 'channel'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('sender_type', sa.String(length=20), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('channel', sa.String(length=20), nullable=False),
        sa.Column('external_message_id', sa.String(length=255), nullable=True),
        sa.Column('intent', sa.String(length=100), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=True),
        sa.Column('route_to', sa.String(length=20), nullable=True),
        sa.Column('requires_human_review', sa.Boolean(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_type', sa.String(length=100), nullable=True),
        sa.Column('message_metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_messages_id'), 'messages', ['id'], unique=False)
    op.create_index(op.f('ix_messages_conversation_id'), 'messages', ['conversation_id'], unique=False)
    op.create_index(op.f('ix_messages_external_message_id'), 'messages', ['external_message_id'], unique=False)
    op.create_index(
        'uq_messages_resident_external_id',
        'messages',
        ['external_message_id'],
        unique=True,
        postgresql_where=sa.text("sender_type = 'resident'"),
        sqlite_where=sa.text("sender_type = 'resident'"),
    )

    op.create_table(
        'maintenance_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=True),
        sa.Column('resident_id', sa.Integer(), nullable=True),
        sa.Column('conversation_id', sa.Integer(), nullable=True),
        sa.Column('source_message_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('extracted_by_ai', sa.Boolean(), nullable=False),
        sa.Column('photo_urls', sa.JSON(), nullable=True),
        sa.Column('reported_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id']),
        sa.ForeignKeyConstraint(['resident_id'], ['residents.id']),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id']),
        sa.ForeignKeyConstraint(['source_message_id'], ['messages.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_message_id'),
    )
    op.create_index(op.f('ix_maintenance_requests_id'), 'maintenance_requests', ['id'], unique=False)
    op.create_index(op.f('ix_maintenance_requests_building_id'), 'maintenance_requests', ['building_id'], unique=False)
    op.create_index(op.f('ix_maintenance_requests_unit_id'), 'maintenance_requests', ['unit_id'], unique=False)
    op.create_index(op.f('ix_maintenance_requests_resident_id'), 'maintenance_requests', ['resident_id'], unique=False)
    op.create_index(op.f('ix_maintenance_requests_conversation_id'), 'maintenance_requests', ['conversation_id'], unique=False)
    op.create_index(op.f('ix_maintenance_requests_status'), 'maintenance_requests', ['status'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('notification_type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
    op.create_index(op.f('ix_notifications_building_id'), 'notifications', ['building_id'], unique=False)
    op.create_index(op.f('ix_notifications_notification_type'), 'notifications', ['notification_type'], unique=False)
    op.create_index(op.f('ix_notifications_is_read'), 'notifications', ['is_read'], unique=False)
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)

    op.create_table(
        'unknown_sender_attempts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('external_message_id', sa.String(length=255), nullable=False),
        sa.Column('from_address', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_message_id'),
    )
    op.create_index(op.f('ix_unknown_sender_attempts_id'), 'unknown_sender_attempts', ['id'], unique=False)
    op.create_index(op.f('ix_unknown_sender_attempts_building_id'), 'unknown_sender_attempts', ['building_id'], unique=False)


def downgrade() -> None:
    op.drop_table('unknown_sender_attempts')
    op.drop_table('notifications')
    op.drop_table('maintenance_requests')
    op.drop_index('uq_messages_resident_external_id', table_name='messages')
    op.drop_table('messages')
    op.drop_index('uq_conversations_active_triple', table_name='conversations')
    op.drop_table('conversations')
    op.drop_table('knowledge_base')
    op.drop_table('building_admins')
    op.drop_table('admin_profiles')
    op.drop_constraint('fk_units_current_renter_id', 'units', type_='foreignkey')
    op.drop_constraint('fk_units_owner_id', 'units', type_='foreignkey')
    op.drop_table('residents')
    op.drop_table('units')
    op.drop_table('buildings')
