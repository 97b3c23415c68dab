"""Initial schema.

Revision ID: 3b1f0c9d2a7e
Revises:
Create Date: 2026-10-19 10:12:41.551203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f0c9d2a7e'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('is_pro', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )
    op.create_table('error_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('jsondata', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('availability_windows',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='availability_windows_day_of_week_check'),
        sa.CheckConstraint('start_time < end_time', name='availability_windows_start_before_end_check'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_availability_windows_user_id'), 'availability_windows', ['user_id'], unique=False)
    op.create_table('hangout_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('group_chat_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_chat_id')
    )
    op.create_index(op.f('ix_hangout_requests_creator_id'), 'hangout_requests', ['creator_id'], unique=False)
    op.create_table('hangout_participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('hangout_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['hangout_id'], ['hangout_requests.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('hangout_id', 'user_id')
    )
    op.create_index(op.f('ix_hangout_participants_hangout_id'), 'hangout_participants', ['hangout_id'], unique=False)
    op.create_index(op.f('ix_hangout_participants_user_id'), 'hangout_participants', ['user_id'], unique=False)
    op.create_table('group_chats',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('hangout_id', sa.Integer(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_permanent', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('purged_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['hangout_id'], ['hangout_requests.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('hangout_id')
    )
    op.create_foreign_key('hangout_requests_group_chat_id_fkey', 'hangout_requests', 'group_chats', ['group_chat_id'], ['id'])
    op.create_table('chat_participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chat_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('keep_chat', sa.Boolean(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['group_chats.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('chat_id', 'user_id')
    )
    op.create_index(op.f('ix_chat_participants_chat_id'), 'chat_participants', ['chat_id'], unique=False)
    op.create_index(op.f('ix_chat_participants_user_id'), 'chat_participants', ['user_id'], unique=False)
    op.create_table('messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chat_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['group_chats.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_messages_chat_id_created_at', 'messages', ['chat_id', 'created_at'], unique=False)


def downgrade():
    op.drop_index('ix_messages_chat_id_created_at', table_name='messages')
    op.drop_table('messages')
    op.drop_index(op.f('ix_chat_participants_user_id'), table_name='chat_participants')
    op.drop_index(op.f('ix_chat_participants_chat_id'), table_name='chat_participants')
    op.drop_table('chat_participants')
    op.drop_constraint('hangout_requests_group_chat_id_fkey', 'hangout_requests', type_='foreignkey')
    op.drop_table('group_chats')
    op.drop_index(op.f('ix_hangout_participants_user_id'), table_name='hangout_participants')
    op.drop_index(op.f('ix_hangout_participants_hangout_id'), table_name='hangout_participants')
    op.drop_table('hangout_participants')
    op.drop_index(op.f('ix_hangout_requests_creator_id'), table_name='hangout_requests')
    op.drop_table('hangout_requests')
    op.drop_index(op.f('ix_availability_windows_user_id'), table_name='availability_windows')
    op.drop_table('availability_windows')
    op.drop_table('error_log')
    op.drop_table('users')
