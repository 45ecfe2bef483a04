"""create localizations table

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-18 09:12:44.518230

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'localizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('model_type', sa.String(length=255), nullable=False, comment='Type of the owning entity'),
        sa.Column('model_id', sa.Integer(), nullable=False, comment='ID of the owning entity'),
        sa.Column('locale', sa.String(length=20), nullable=False, comment="Locale code (e.g., 'en', 'fr')"),
        sa.Column('field', sa.String(length=255), nullable=False, comment='Name of the localized field'),
        sa.Column('value', sa.Text(), nullable=True, comment='Localized text; NULL means not yet set'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('model_type', 'model_id', 'locale', 'field',
                            name='uq_localizations_entity_locale_field'),
    )
    op.create_index('ix_localizations_id', 'localizations', ['id'])
    op.create_index('idx_localizations_entity', 'localizations', ['model_type', 'model_id'])


def downgrade():
    op.drop_index('idx_localizations_entity', table_name='localizations')
    op.drop_index('ix_localizations_id', table_name='localizations')
    op.drop_table('localizations')
