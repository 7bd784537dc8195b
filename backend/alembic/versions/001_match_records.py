"""Initial migration: create matchrecord and teamtemplate tables

Revision ID: 001_match_records
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_match_records"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "matchrecord",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match2id", sa.String(), nullable=False),
        sa.Column("match2bracketid", sa.String(), nullable=False),
        sa.Column("date", sa.String(), nullable=True),
        sa.Column("dateexact", sa.String(), nullable=True),
        sa.Column("finished", sa.String(), nullable=True),
        sa.Column("mode", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("resulttype", sa.String(), nullable=True),
        sa.Column("walkover", sa.String(), nullable=True),
        sa.Column("winner", sa.String(), nullable=True),
        sa.Column("vod", sa.String(), nullable=True),
        sa.Column("match2bracketdata", sa.JSON(), nullable=True),
        sa.Column("match2opponents", sa.JSON(), nullable=True),
        sa.Column("match2games", sa.JSON(), nullable=True),
        sa.Column("extradata", sa.JSON(), nullable=True),
        sa.Column("links", sa.JSON(), nullable=True),
        sa.Column("stream", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match2id", name="uq_matchrecord_match2id"),
    )
    op.create_index(op.f("ix_matchrecord_match2id"), "matchrecord", ["match2id"], unique=False)
    op.create_index(op.f("ix_matchrecord_match2bracketid"), "matchrecord", ["match2bracketid"], unique=False)

    op.create_table(
        "teamtemplate",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("template", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("bracketname", sa.String(), nullable=False),
        sa.Column("shortname", sa.String(), nullable=False),
        sa.Column("page", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teamtemplate_template"), "teamtemplate", ["template"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_teamtemplate_template"), table_name="teamtemplate")
    op.drop_table("teamtemplate")
    op.drop_index(op.f("ix_matchrecord_match2bracketid"), table_name="matchrecord")
    op.drop_index(op.f("ix_matchrecord_match2id"), table_name="matchrecord")
    op.drop_table("matchrecord")
