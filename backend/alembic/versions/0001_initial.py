from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "sport",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "ruleset",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("sport_id", sa.String(), sa.ForeignKey("sport.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("sport_id", sa.String(), sa.ForeignKey("sport.id"), nullable=False),
        sa.Column("ruleset_id", sa.String(), sa.ForeignKey("ruleset.id"), nullable=True),
        sa.Column("scoring_config", sa.JSON(), nullable=False),
        sa.Column("scoring_state", sa.JSON(), nullable=True),
        sa.Column("scoring_version", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("winner_side", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "scoring_log",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("side", sa.Integer(), nullable=True),
        sa.Column("score_before", sa.String(), nullable=False, server_default=""),
        sa.Column("score_after", sa.String(), nullable=False, server_default=""),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("match_id", "version", name="uq_scoring_log_match_id_version"),
    )
    op.create_index("ix_scoring_log_match_id", "scoring_log", ["match_id"])


def downgrade():
    op.drop_index("ix_scoring_log_match_id", table_name="scoring_log")
    op.drop_table("scoring_log")
    op.drop_table("match")
    op.drop_table("ruleset")
    op.drop_table("sport")
