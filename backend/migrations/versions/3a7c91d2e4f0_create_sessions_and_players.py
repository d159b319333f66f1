"""create sessions and players

Revision ID: 3a7c91d2e4f0
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c91d2e4f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('host_id', sa.String(length=64), nullable=False),
        sa.Column('impostor_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('current_word', sa.String(length=128), nullable=True),
        sa.Column('round_number', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('impostors', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('first_player_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    with op.batch_alter_table('sessions') as batch_op:
        batch_op.create_index('ix_sessions_code', ['code'], unique=True)

    op.create_table(
        'players',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('sessions.id'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
    )
    with op.batch_alter_table('players') as batch_op:
        batch_op.create_index('ix_players_session_id', ['session_id'], unique=False)


def downgrade():
    with op.batch_alter_table('players') as batch_op:
        batch_op.drop_index('ix_players_session_id')
    op.drop_table('players')
    with op.batch_alter_table('sessions') as batch_op:
        batch_op.drop_index('ix_sessions_code')
    op.drop_table('sessions')
