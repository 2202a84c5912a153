"""create room_record table for the sql room store

Revision ID: 4c2a9d7e1b30
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9d7e1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'room_record' in set(insp.get_table_names()):
        return

    op.create_table(
        'room_record',
        sa.Column('seq', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.String(length=8), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_room_record_room_id', 'room_record', ['room_id'], unique=True)
    op.create_index('ix_room_record_status', 'room_record', ['status'], unique=False)


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'room_record' not in set(insp.get_table_names()):
        return
    op.drop_index('ix_room_record_status', table_name='room_record')
    op.drop_index('ix_room_record_room_id', table_name='room_record')
    op.drop_table('room_record')
