"""create game catalog and game_session tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2025-09-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('type', sa.String(length=32), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('max_players', sa.Integer(), nullable=False),
            sa.Column('max_teams', sa.Integer(), nullable=False),
            sa.Column('teams_only', sa.Boolean(), nullable=False),
        )

    if 'game_session' not in existing_tables:
        op.create_table(
            'game_session',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('mode', sa.String(length=16), nullable=False),
            sa.Column('player_count', sa.Integer(), nullable=True),
            sa.Column('team_count', sa.Integer(), nullable=True),
            sa.Column('teams', sa.Text(), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
            sa.Column('results', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )


def downgrade():
    op.drop_table('game_session')
    op.drop_table('game')
