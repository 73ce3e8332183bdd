from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="player"),
        sa.Column("suspended_until", sa.DateTime(), nullable=True),
    )
    op.create_index(
        "uq_user_username_lower",
        "user",
        [sa.text("lower(username)")],
        unique=True,
    )
    op.create_table(
        "ranking",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "requires_validation",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
    )
    op.create_table(
        "player_ranking",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("ranking_id", sa.Integer(), sa.ForeignKey("ranking.id"), nullable=False),
        sa.Column("category", sa.String(length=2), nullable=False, server_default="C"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint(
            "player_id",
            "ranking_id",
            name="uq_player_ranking_player_id_ranking_id",
        ),
    )
    op.create_table(
        "location",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("coordinates", sa.JSON(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ranking_id", sa.Integer(), sa.ForeignKey("ranking.id"), nullable=False),
        sa.Column("player1_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("player2_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("location.id"), nullable=True),
        sa.Column("location_name", sa.String(), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("played_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("score", sa.JSON(), nullable=False),
    )
    op.create_index("ix_match_ranking_status", "match", ["ranking_id", "status"])


def downgrade():
    op.drop_index("ix_match_ranking_status", table_name="match")
    for table in ["match", "location", "player_ranking", "ranking"]:
        op.drop_table(table)
    op.drop_index("uq_user_username_lower", table_name="user")
    op.drop_table("user")
