"""create rooms, players, game_questions and questions

Revision ID: 5c2d9e7a1b40
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e7a1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'rooms' not in existing_tables:
        op.create_table(
            'rooms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('code', sa.String(length=6), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False, server_default='waiting'),
            sa.Column('max_players', sa.Integer(), nullable=False, server_default='8'),
            sa.Column('current_question', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_questions', sa.Integer(), nullable=False, server_default='10'),
            sa.Column('question_start_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('time_limit', sa.Integer(), nullable=False, server_default='30'),
            sa.Column('category', sa.String(length=50), nullable=True),
            sa.Column('game_mode', sa.String(length=20), nullable=False, server_default='quick'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("status IN ('waiting', 'active', 'finished')", name='ck_rooms_status'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_rooms_code', 'rooms', ['code'], unique=True)

    if 'players' not in existing_tables:
        op.create_table(
            'players',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_code', sa.String(length=6), nullable=False),
            sa.Column('name', sa.String(length=50), nullable=False),
            sa.Column('avatar', sa.String(length=20), nullable=False, server_default='knight'),
            sa.Column('is_host', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('current_answer', sa.Integer(), nullable=True),
            sa.Column('answers', sa.Text(), nullable=False, server_default='[]'),
            sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['room_code'], ['rooms.code'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_players_room_code', 'players', ['room_code'])

    if 'game_questions' not in existing_tables:
        op.create_table(
            'game_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_code', sa.String(length=6), nullable=False),
            sa.Column('question_index', sa.Integer(), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('options', sa.Text(), nullable=False),
            sa.Column('correct_answer', sa.Integer(), nullable=False),
            sa.Column('category', sa.String(length=50), nullable=True),
            sa.Column('difficulty', sa.String(length=20), nullable=True),
            sa.ForeignKeyConstraint(['room_code'], ['rooms.code'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('room_code', 'question_index', name='uq_game_questions_room_index'),
        )
        op.create_index('ix_game_questions_room_code', 'game_questions', ['room_code'])

    if 'questions' not in existing_tables:
        op.create_table(
            'questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('options', sa.Text(), nullable=False),
            sa.Column('correct_answer', sa.Integer(), nullable=False),
            sa.Column('category', sa.String(length=50), nullable=True),
            sa.Column('difficulty', sa.String(length=20), nullable=False, server_default='medium'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )


def downgrade():
    op.drop_table('questions')
    op.drop_index('ix_game_questions_room_code', table_name='game_questions')
    op.drop_table('game_questions')
    op.drop_index('ix_players_room_code', table_name='players')
    op.drop_table('players')
    op.drop_index('ix_rooms_code', table_name='rooms')
    op.drop_table('rooms')
