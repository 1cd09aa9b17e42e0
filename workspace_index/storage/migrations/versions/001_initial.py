"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create chunks table; AUTOINCREMENT keeps ids from being reused
    op.create_table(
        'chunks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=1024), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('start_line', sa.Integer(), nullable=False),
        sa.Column('end_line', sa.Integer(), nullable=False),
        sa.Column('language', sa.String(length=64), nullable=False),
        sa.Column('chunk_type', sa.String(length=32), nullable=False, server_default='block'),
        sa.Column('embedding', sa.LargeBinary(), nullable=False),
        sa.Column('embedding_dim', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_chunks_file_path', 'chunks', ['file_path'])


def downgrade() -> None:
    op.drop_index('idx_chunks_file_path', table_name='chunks')
    op.drop_table('chunks')
