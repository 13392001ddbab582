from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202610191500_a1c3e9d2"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(), nullable=True, unique=True, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
    )

    op.create_table(
        'media_boxes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('owner_id', sa.String(length=64), nullable=False, unique=True, index=True),
        sa.Column('directory', sa.String(length=255), nullable=False, unique=True),
        sa.Column('max_size', sa.BigInteger(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('updated_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'media_contents',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('media_box_id', sa.Integer(), sa.ForeignKey('media_boxes.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('subdirectory', sa.String(length=255), nullable=True),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('size', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('content_type', sa.String(length=255), nullable=False),
        sa.Column('uri', sa.String(length=512), nullable=True, unique=True),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('updated_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('media_box_id', 'subdirectory', 'filename', name='uk_media_contents'),
    )

def downgrade() -> None:
    op.drop_table('media_contents')
    op.drop_table('media_boxes')
    op.drop_table('users')
