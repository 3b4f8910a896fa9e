"""add role access overrides and blog posts

Revision ID: 8d3f0a6c4e21
Revises: 5b1e7c2d9a40
Create Date: 2026-10-12 09:30:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d3f0a6c4e21'
down_revision = '5b1e7c2d9a40'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'role_access',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('page', sa.String(length=64), nullable=False),
        sa.Column('can_view', sa.Boolean(), nullable=True),
        sa.Column('can_add', sa.Boolean(), nullable=True),
        sa.Column('can_edit', sa.Boolean(), nullable=True),
        sa.Column('can_delete', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role', 'page', name='uq_role_access_role_page'),
    )

    op.create_table(
        'blog_post',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', sa.String(length=64), nullable=False),
        sa.Column('author_name', sa.String(length=150), nullable=False),
        sa.Column('author_email', sa.String(length=255), nullable=False),
        sa.Column('published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blog_post_author_id', 'blog_post', ['author_id'], unique=False)


def downgrade():
    op.drop_index('ix_blog_post_author_id', table_name='blog_post')
    op.drop_table('blog_post')
    op.drop_table('role_access')
