"""create users and login_log tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0a1b2c3d4e5f"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("login", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=64), nullable=False),
        sa.Column("salt", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_login"), ["login"], unique=True)

    op.create_table(
        "login_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("login", sa.Text(), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=False),
        sa.Column("succeeded", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("login_log", schema=None) as batch_op:
        batch_op.create_index("ix_login_log_user_id_id", ["user_id", "id"], unique=False)
        batch_op.create_index("ix_login_log_ip_id", ["ip", "id"], unique=False)
        batch_op.create_index("ix_login_log_user_id_succeeded_id", ["user_id", "succeeded", "id"], unique=False)
        batch_op.create_index("ix_login_log_ip_succeeded_id", ["ip", "succeeded", "id"], unique=False)


def downgrade():
    with op.batch_alter_table("login_log", schema=None) as batch_op:
        batch_op.drop_index("ix_login_log_ip_succeeded_id")
        batch_op.drop_index("ix_login_log_user_id_succeeded_id")
        batch_op.drop_index("ix_login_log_ip_id")
        batch_op.drop_index("ix_login_log_user_id_id")
    op.drop_table("login_log")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_login"))
    op.drop_table("users")
