"""Canvas graph – canvas_nodes, node_connections and ui_variations

Revision ID: 0002_canvas
Revises: 0001_initial
Create Date: 2026-10-19

Nodes are keyed by (project_id, client_id) so the frontend can address
them by the id it generated.  Connections reference client ids, not row ids.
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_canvas"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

_NODE_TYPES = ("idea", "design", "code", "import", "api", "cli", "database", "payment", "env")
_NODE_STATUSES = ("idle", "generating", "ready", "running")
_NODE_PLATFORMS = ("web", "mobile", "api", "desktop", "cli", "database", "env")
_VARIATION_CATEGORIES = ("header", "hero", "features", "pricing", "footer", "dashboard", "mobile")


def upgrade() -> None:
    # -- canvas_nodes ---------------------------------------------------
    op.create_table(
        "canvas_nodes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("client_id", sa.String(255), nullable=False),
        sa.Column("node_type", sa.Enum(*_NODE_TYPES, name="node_type"), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_NODE_STATUSES, name="node_status"),
            nullable=False,
            server_default="idle",
        ),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("file_name", sa.String(512), nullable=True),
        sa.Column("generated_code", sa.Text(), nullable=True),
        sa.Column("picked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("parent_id", sa.String(255), nullable=True),
        sa.Column("page_role", sa.String(64), nullable=True),
        sa.Column("tag", sa.String(64), nullable=True),
        sa.Column("platform", sa.Enum(*_NODE_PLATFORMS, name="node_platform"), nullable=True),
        sa.Column("language", sa.String(64), nullable=True),
        sa.Column("ai_model", sa.String(255), nullable=True),
        sa.Column("element_links", sa.JSON(), nullable=False),
        sa.Column("env_vars", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("project_id", "client_id", name="canvas_nodes_project_id_client_id_key"),
    )
    op.create_index("ix_canvas_nodes_project_id", "canvas_nodes", ["project_id"])

    # -- node_connections -----------------------------------------------
    op.create_table(
        "node_connections",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_client_id", sa.String(255), nullable=False),
        sa.Column("to_client_id", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "project_id",
            "from_client_id",
            "to_client_id",
            name="node_connections_project_id_from_client_id_to_client_id_key",
        ),
    )
    op.create_index("ix_node_connections_project_id", "node_connections", ["project_id"])

    # -- ui_variations --------------------------------------------------
    op.create_table(
        "ui_variations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("source_node_client_id", sa.String(255), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("preview_html", sa.Text(), nullable=False, server_default=""),
        sa.Column("code", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "category",
            sa.Enum(*_VARIATION_CATEGORIES, name="variation_category"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_ui_variations_project_id", "ui_variations", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_ui_variations_project_id", table_name="ui_variations")
    op.drop_table("ui_variations")
    op.drop_index("ix_node_connections_project_id", table_name="node_connections")
    op.drop_table("node_connections")
    op.drop_index("ix_canvas_nodes_project_id", table_name="canvas_nodes")
    op.drop_table("canvas_nodes")
    sa.Enum(name="variation_category").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="node_platform").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="node_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="node_type").drop(op.get_bind(), checkfirst=True)
