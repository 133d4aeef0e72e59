"""create generations and assets tables

Revision ID: 3f1c2b7d9e10
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2b7d9e10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'generations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('style', sa.String(length=20), nullable=True),
        sa.Column('template', sa.String(length=20), nullable=True),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('css', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('screenshot_url', sa.String(length=1024), nullable=True),
        sa.Column('screenshot_key', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_generations_status', 'generations', ['status'])
    op.create_index('ix_generations_created_at', 'generations', ['created_at'])

    op.create_table(
        'assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('generation_id', sa.String(length=36), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('path', sa.String(length=512), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['generation_id'], ['generations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assets_generation_id', 'assets', ['generation_id'])


def downgrade():
    op.drop_index('ix_assets_generation_id', table_name='assets')
    op.drop_table('assets')
    op.drop_index('ix_generations_created_at', table_name='generations')
    op.drop_index('ix_generations_status', table_name='generations')
    op.drop_table('generations')
