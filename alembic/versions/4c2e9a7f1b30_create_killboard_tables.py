"""Create killboard tables

Revision ID: 4c2e9a7f1b30
Revises:
Create Date: 2026-10-16 09:12:44.018231

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4c2e9a7f1b30'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the kill log, roster cache, settings, trackers and builds."""

    # --- kill_events ---
    op.create_table(
        "kill_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(50), nullable=False),
        sa.Column("killer_name", sa.String(100), nullable=True),
        sa.Column("killer_id", sa.String(50), nullable=True),
        sa.Column("victim_name", sa.String(100), nullable=True),
        sa.Column("victim_id", sa.String(50), nullable=True),
        sa.Column("fame", sa.Integer, nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("guild_member_involved", sa.String(100), nullable=False),
        sa.Column("is_kill", sa.Boolean, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("event_id"),
    )
    op.create_index(
        "ix_kill_events_member_time", "kill_events",
        ["guild_member_involved", "timestamp"],
    )

    # --- guild_members ---
    op.create_table(
        "guild_members",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("guild_id", sa.String(50), nullable=False),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_guild_members_guild_id", "guild_members", ["guild_id"])

    # --- server_settings ---
    op.create_table(
        "server_settings",
        sa.Column("guild_id", sa.String(30), primary_key=True),
        sa.Column("killboard_channel", sa.String(30), nullable=True),
        sa.Column("language", sa.String(10), nullable=False, server_default="en"),
        sa.Column("builder_role", sa.String(30), nullable=True),
        sa.Column("status_channel", sa.String(30), nullable=True),
    )

    # --- tracked_entities ---
    op.create_table(
        "tracked_entities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("guild_id", sa.String(30), nullable=False),
        sa.Column("entity_id", sa.String(50), nullable=False),
        sa.Column("entity_name", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(10), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "guild_id", "entity_id", name="uq_tracked_entities_guild_entity",
        ),
    )

    # --- builds ---
    op.create_table(
        "builds",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("guild_id", sa.String(30), nullable=False),
        sa.Column("build_name", sa.String(100), nullable=False),
        sa.Column("creator_id", sa.String(30), nullable=False),
        sa.Column("weapon", sa.String(100), nullable=True),
        sa.Column("helmet", sa.String(100), nullable=True),
        sa.Column("armor", sa.String(100), nullable=True),
        sa.Column("shoes", sa.String(100), nullable=True),
        sa.Column("cape", sa.String(100), nullable=True),
        sa.Column("off_hand", sa.String(100), nullable=True),
        sa.Column("bag", sa.String(100), nullable=True),
        sa.Column("mount", sa.String(100), nullable=True),
        sa.Column("food", sa.String(100), nullable=True),
        sa.Column("potion", sa.String(100), nullable=True),
        sa.Column("spells", sa.Text, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_builds_guild_name", "builds", ["guild_id", "build_name"])


def downgrade() -> None:
    """Drop every killboard table."""
    op.drop_index("ix_builds_guild_name", table_name="builds")
    op.drop_table("builds")
    op.drop_table("tracked_entities")
    op.drop_table("server_settings")
    op.drop_index("ix_guild_members_guild_id", table_name="guild_members")
    op.drop_table("guild_members")
    op.drop_index("ix_kill_events_member_time", table_name="kill_events")
    op.drop_table("kill_events")
