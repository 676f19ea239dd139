# mypy: ignore-errors
"""
Migration Alembic pour créer les tables du catalogue (platforms, assets).

Les vecteurs sont stockés en JSON (tableau de flottants, nullable): `NULL` signifie
« jamais synchronisé ».
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée les tables `platforms` et `assets`."""
    op.create_table(
        "platforms",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("industry", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("audience_data", sa.JSON(), nullable=True),
        sa.Column("device_split", sa.JSON(), nullable=True),
        sa.Column("campaign_data", sa.JSON(), nullable=True),
        sa.Column("embedding", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "assets",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=128), nullable=True),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("placement", sa.String(length=255), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=True),
        sa.Column("platform_id", sa.String(length=64), sa.ForeignKey("platforms.id"), nullable=True),
        sa.Column("embedding", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_assets_platform_id", "assets", ["platform_id"])


def downgrade() -> None:
    """Supprime les tables du catalogue."""
    op.drop_index("ix_assets_platform_id", table_name="assets")
    op.drop_table("assets")
    op.drop_table("platforms")
