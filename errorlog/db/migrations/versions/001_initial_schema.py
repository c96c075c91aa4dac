"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create error_log table
    op.create_table(
        'error_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('application', sa.String(60), nullable=False),
        sa.Column('host', sa.String(50), nullable=False),
        sa.Column('type', sa.String(100), nullable=False),
        sa.Column('source', sa.String(60), nullable=False),
        sa.Column('message', sa.String(500), nullable=False),
        sa.Column('user', sa.String(50), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('time_utc', sa.DateTime(), nullable=False),
        sa.Column('all_xml', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index(
        'ix_error_log_time_utc_id',
        'error_log',
        [sa.text('time_utc DESC'), sa.text('id DESC')],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('ix_error_log_time_utc_id', table_name='error_log')
    op.drop_table('error_log')
