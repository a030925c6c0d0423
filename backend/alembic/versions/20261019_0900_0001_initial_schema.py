"""Initial schema — projects, assets with versions/variants, scripts, scenes, exports

Revision ID: 0001
Revises: None
Create Date: 2026-10-19 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLE_KWARGS = {
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}


_TIMESTAMP = sa.DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", _TIMESTAMP, nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", _TIMESTAMP, nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("visual_style", sa.String(255), nullable=False, server_default=""),
        sa.Column("base_model", sa.String(100), nullable=False, server_default=""),
        sa.Column("default_sampler", sa.String(100), nullable=False, server_default=""),
        sa.Column("status", sa.String(50), nullable=False, server_default="active"),
        *_timestamps(),
        **_TABLE_KWARGS,
    )

    op.create_table(
        "assets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("visual_prompt", sa.Text, nullable=False),
        sa.Column("negative_prompt", sa.Text, nullable=False),
        sa.Column("seed", sa.BigInteger, nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("locked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("generation_status", sa.String(20), nullable=False, server_default="idle"),
        sa.Column("metadata", sa.JSON, nullable=True),
        *_timestamps(),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_assets_project_id", "assets", ["project_id"])
    op.create_index("ix_assets_type", "assets", ["type"])

    op.create_table(
        "asset_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("asset_id", sa.String(36), sa.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("visual_prompt", sa.Text, nullable=False),
        sa.Column("negative_prompt", sa.Text, nullable=False),
        sa.Column("seed", sa.BigInteger, nullable=True),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        *_timestamps(updated=False),
        sa.UniqueConstraint("asset_id", "version", name="uq_asset_versions_asset_version"),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_asset_versions_asset_id", "asset_versions", ["asset_id"])

    op.create_table(
        "asset_variants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("asset_id", sa.String(36), sa.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("variant_index", sa.Integer, nullable=False),
        sa.Column("seed", sa.BigInteger, nullable=True),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("selected", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(updated=False),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_asset_variants_asset_id", "asset_variants", ["asset_id"])

    op.create_table(
        "scripts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text().with_variant(mysql.LONGTEXT, "mysql"), nullable=False),
        sa.Column("compiled", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_scripts_project_id", "scripts", ["project_id"])

    op.create_table(
        "scenes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("script_id", sa.String(36), sa.ForeignKey("scripts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("scene_number", sa.Integer, nullable=False, server_default="1"),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("mood", sa.String(100), nullable=False, server_default="neutral"),
        sa.Column("camera_angle", sa.String(100), nullable=False, server_default="medium shot"),
        sa.Column("lighting", sa.String(100), nullable=False, server_default="natural"),
        sa.Column("render_status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("rendered_url", sa.String(1024), nullable=True),
        sa.Column("render_metadata", sa.JSON, nullable=True),
        *_timestamps(),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_scenes_project_id", "scenes", ["project_id"])
    op.create_index("ix_scenes_script_id", "scenes", ["script_id"])

    op.create_table(
        "scene_assets",
        sa.Column("scene_id", sa.String(36), sa.ForeignKey("scenes.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("asset_id", sa.String(36), sa.ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", sa.String(50), nullable=False, server_default="primary"),
        sa.Column("position_hint", sa.String(50), nullable=False, server_default="center"),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_scene_assets_asset_id", "scene_assets", ["asset_id"])

    op.create_table(
        "scene_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("scene_id", sa.String(36), sa.ForeignKey("scenes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("rendered_url", sa.String(1024), nullable=True),
        sa.Column("render_metadata", sa.JSON, nullable=True),
        *_timestamps(updated=False),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_scene_versions_scene_id", "scene_versions", ["scene_id"])

    op.create_table(
        "exports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("file_url", sa.String(1024), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        *_timestamps(updated=False),
        **_TABLE_KWARGS,
    )
    op.create_index("ix_exports_project_id", "exports", ["project_id"])


def downgrade() -> None:
    op.drop_table("exports")
    op.drop_table("scene_versions")
    op.drop_table("scene_assets")
    op.drop_table("scenes")
    op.drop_table("scripts")
    op.drop_table("asset_variants")
    op.drop_table("asset_versions")
    op.drop_table("assets")
    op.drop_table("projects")
