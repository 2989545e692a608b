"""create preferences

Revision ID: b7c1e2d4a9f0
Revises:
Create Date: 2026-10-19 10:12:40.118204

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'b7c1e2d4a9f0'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        'preferences',
        sa.Column('key', sa.String(length=40), nullable=False),
        sa.Column('value', sa.String(length=255), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('key', name=op.f('pk_preferences')),
    )

def downgrade() -> None:
    op.drop_table('preferences')
