"""create worker_deployments and mcp_servers

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "worker_deployments",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("worker_name", sa.String(255), nullable=False),
        sa.Column("server_id", sa.String(255), nullable=False),
        sa.Column("namespace", sa.String(255), nullable=False),
        sa.Column("script_content", sa.Text(), nullable=False),
        sa.Column("bindings", sa.JSON(), nullable=False),
        sa.Column("status", sa.Enum("deploying", "active", "failed", name="deploymentstatus"), nullable=False),
        sa.Column("deployed_at", sa.DateTime(), nullable=True),
        sa.Column("deployment_url", sa.String(512), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_worker_deployments_id", "worker_deployments", ["id"])
    op.create_index("ix_worker_deployments_worker_name", "worker_deployments", ["worker_name"])
    op.create_index("ix_worker_deployments_server_id", "worker_deployments", ["server_id"])
    op.create_index("ix_worker_deployments_status", "worker_deployments", ["status"])

    op.create_table(
        "mcp_servers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("worker_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_mcp_servers_id", "mcp_servers", ["id"])


def downgrade() -> None:
    op.drop_table("mcp_servers")
    op.drop_table("worker_deployments")
    sa.Enum(name="deploymentstatus").drop(op.get_bind(), checkfirst=True)
