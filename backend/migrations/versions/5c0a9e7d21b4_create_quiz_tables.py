"""create drawing, score, leaderboard, quiz history and player stats tables

Revision ID: 5c0a9e7d21b4
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c0a9e7d21b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa.inspect(bind).get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('avatar_url', sa.String(length=512), nullable=True),
            sa.Column('created_at', sa.BigInteger(), nullable=False),
        )

    if 'drawing' not in existing_tables:
        op.create_table(
            'drawing',
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('created_by', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.BigInteger(), nullable=False),
            sa.Column('answer', sa.String(length=64), nullable=False),
            sa.Column('hint', sa.String(length=128), nullable=True),
            sa.Column('total_strokes', sa.Integer(), nullable=False),
            sa.Column('subreddit_name', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_drawing_created_by', 'drawing', ['created_by'])
        op.create_index('ix_drawing_created_at', 'drawing', ['created_at'])
        op.create_index('ix_drawing_subreddit_name', 'drawing', ['subreddit_name'])

    if 'drawing_strokes' not in existing_tables:
        op.create_table(
            'drawing_strokes',
            sa.Column('drawing_id', sa.Integer(), sa.ForeignKey('drawing.id'), primary_key=True),
            sa.Column('payload', sa.Text(), nullable=False),
        )

    if 'score' not in existing_tables:
        op.create_table(
            'score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('drawing_id', sa.Integer(), sa.ForeignKey('drawing.id'), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('base_score', sa.Integer(), nullable=False),
            sa.Column('time_bonus', sa.Integer(), nullable=False),
            sa.Column('elapsed_time', sa.Float(), nullable=False),
            sa.Column('viewed_strokes', sa.Float(), nullable=False),
            sa.Column('submitted_at', sa.BigInteger(), nullable=False),
            sa.Column('version_id', sa.Integer(), nullable=False),
            sa.UniqueConstraint('drawing_id', 'user_id', name='uq_score_drawing_user'),
        )
        op.create_index('ix_score_drawing_id', 'score', ['drawing_id'])
        op.create_index('ix_score_user_id', 'score', ['user_id'])

    if 'leaderboard' not in existing_tables:
        op.create_table(
            'leaderboard',
            sa.Column('drawing_id', sa.Integer(), sa.ForeignKey('drawing.id'), primary_key=True),
            sa.Column('submissions', sa.Integer(), nullable=False),
            sa.Column('version_id', sa.Integer(), nullable=False),
        )

    if 'leaderboard_entry' not in existing_tables:
        op.create_table(
            'leaderboard_entry',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('drawing_id', sa.Integer(), sa.ForeignKey('leaderboard.drawing_id'), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('submitted_at', sa.BigInteger(), nullable=False),
            sa.UniqueConstraint('drawing_id', 'user_id', name='uq_leaderboard_drawing_user'),
        )
        op.create_index('ix_leaderboard_entry_drawing_id', 'leaderboard_entry', ['drawing_id'])

    if 'quiz_history_entry' not in existing_tables:
        op.create_table(
            'quiz_history_entry',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('drawing_id', sa.Integer(), sa.ForeignKey('drawing.id'), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('base_score', sa.Integer(), nullable=False),
            sa.Column('time_bonus', sa.Integer(), nullable=False),
            sa.Column('submitted_at', sa.BigInteger(), nullable=False),
            sa.Column('community', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_quiz_history_entry_user_id', 'quiz_history_entry', ['user_id'])
        op.create_index('ix_quiz_history_entry_submitted_at', 'quiz_history_entry', ['submitted_at'])

    if 'player_stats' not in existing_tables:
        op.create_table(
            'player_stats',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('community', sa.String(length=64), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False),
            sa.Column('quiz_count', sa.Integer(), nullable=False),
            sa.Column('last_updated', sa.BigInteger(), nullable=False),
            sa.Column('version_id', sa.Integer(), nullable=False),
            sa.UniqueConstraint('community', 'user_id', name='uq_player_stats_scope_user'),
        )
        op.create_index('ix_player_stats_community', 'player_stats', ['community'])
        op.create_index('ix_player_stats_total_score', 'player_stats', ['total_score'])


def downgrade():
    # Children before parents
    for table in ('player_stats', 'quiz_history_entry', 'leaderboard_entry', 'leaderboard',
                  'score', 'drawing_strokes', 'drawing', 'user'):
        op.drop_table(table)
