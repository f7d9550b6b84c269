"""create oauth clients and tokens

Revision ID: 7b1e4c2d9a10
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7b1e4c2d9a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'oauth_clients',
        sa.Column('id', sa.String(length=24), nullable=False),
        sa.Column('redirect_uri', sa.String(length=2048), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('secret', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_oauth_clients')),
    )
    op.create_table(
        'oauth_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('client_id', sa.String(length=24), nullable=False),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_in', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type', sa.Enum('authorization_code', 'access_token', name='token_type',
                                  native_enum=False, length=32), nullable=False),
        sa.Column('scope_list', sa.JSON(), nullable=False),
        sa.Column('last_access', sa.DateTime(timezone=True), nullable=True),
        sa.Column('valid', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['oauth_clients.id'],
                                name=op.f('fk_oauth_tokens_client_id_oauth_clients')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_oauth_tokens')),
        sa.UniqueConstraint('token', name='uq_oauth_tokens_token'),
    )
    op.create_index('ix_oauth_tokens_client_id', 'oauth_tokens', ['client_id'], unique=False)


def downgrade():
    op.drop_index('ix_oauth_tokens_client_id', table_name='oauth_tokens')
    op.drop_table('oauth_tokens')
    op.drop_table('oauth_clients')
