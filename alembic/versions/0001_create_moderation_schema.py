"""create users, charities, donations, activity log and report tables

Revision ID: 0001_create_moderation_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_create_moderation_schema"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = sa.Enum("admin", "donor", "charity_admin", name="user_role")
ACCOUNT_STATUS = sa.Enum("active", "suspended", name="account_status")
CHARITY_STATUS = sa.Enum("pending", "approved", "rejected", name="charity_verification_status")
DONATION_STATUS = sa.Enum("pending", "confirmed", "rejected", name="donation_status")
REPORT_ENTITY_TYPE = sa.Enum("user", "charity", "campaign", "donation", name="report_entity_type")
REPORT_REASON = sa.Enum(
    "fraud",
    "fake_proof",
    "scam",
    "fake_charity",
    "misuse_of_funds",
    "spam",
    "harassment",
    "inappropriate_content",
    "other",
    name="report_reason",
)
REPORT_SEVERITY = sa.Enum("pending", "low", "medium", "high", "critical", name="report_severity")
REPORT_STATUS = sa.Enum("pending", "under_review", "resolved", "dismissed", name="report_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False, server_default="donor"),
        sa.Column("status", ACCOUNT_STATUS, nullable=False, server_default="active"),
        sa.Column("suspended_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspension_reason", sa.Text(), nullable=True),
        sa.Column("suspension_level", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_suspended_until", "users", ["suspended_until"])

    op.create_table(
        "charities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("verification_status", CHARITY_STATUS, nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.String(length=1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_charities_owner_id", "charities", ["owner_id"])

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("charity_id", sa.Integer(), sa.ForeignKey("charities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_campaigns_charity_id", "campaigns", ["charity_id"])

    op.create_table(
        "donations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("donor_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("charity_id", sa.Integer(), sa.ForeignKey("charities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("campaign_id", sa.Integer(), sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", DONATION_STATUS, nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_donations_donor_id", "donations", ["donor_id"])
    op.create_index("ix_donations_charity_id", "donations", ["charity_id"])
    op.create_index("ix_donations_campaign_id", "donations", ["campaign_id"])

    op.create_table(
        "user_activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("actor_role", sa.String(length=32), nullable=True),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_type", sa.String(length=32), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_activity_logs_actor_user_id", "user_activity_logs", ["actor_user_id"])
    op.create_index("ix_user_activity_logs_action_type", "user_activity_logs", ["action_type"])
    op.create_index("ix_user_activity_logs_target_type", "user_activity_logs", ["target_type"])
    op.create_index("ix_user_activity_logs_created_at", "user_activity_logs", ["created_at"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reporter_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reporter_role", sa.String(length=32), nullable=True),
        sa.Column("reported_entity_type", REPORT_ENTITY_TYPE, nullable=False),
        sa.Column("reported_entity_id", sa.Integer(), nullable=False),
        sa.Column("reason", REPORT_REASON, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("evidence_path", sa.String(length=512), nullable=True),
        sa.Column("severity", REPORT_SEVERITY, nullable=False, server_default="pending"),
        sa.Column("status", REPORT_STATUS, nullable=False, server_default="pending"),
        sa.Column("penalty_days", sa.Integer(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("action_taken", sa.String(length=32), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_reports_reporter_id", "reports", ["reporter_id"])
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])
    op.create_index("ix_reports_entity", "reports", ["reported_entity_type", "reported_entity_id"])


def downgrade() -> None:
    op.drop_index("ix_reports_entity", table_name="reports")
    op.drop_index("ix_reports_created_at", table_name="reports")
    op.drop_index("ix_reports_status", table_name="reports")
    op.drop_index("ix_reports_reporter_id", table_name="reports")
    op.drop_table("reports")
    op.drop_index("ix_user_activity_logs_created_at", table_name="user_activity_logs")
    op.drop_index("ix_user_activity_logs_target_type", table_name="user_activity_logs")
    op.drop_index("ix_user_activity_logs_action_type", table_name="user_activity_logs")
    op.drop_index("ix_user_activity_logs_actor_user_id", table_name="user_activity_logs")
    op.drop_table("user_activity_logs")
    op.drop_index("ix_donations_campaign_id", table_name="donations")
    op.drop_index("ix_donations_charity_id", table_name="donations")
    op.drop_index("ix_donations_donor_id", table_name="donations")
    op.drop_table("donations")
    op.drop_index("ix_campaigns_charity_id", table_name="campaigns")
    op.drop_table("campaigns")
    op.drop_index("ix_charities_owner_id", table_name="charities")
    op.drop_table("charities")
    op.drop_index("ix_users_suspended_until", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        REPORT_STATUS,
        REPORT_SEVERITY,
        REPORT_REASON,
        REPORT_ENTITY_TYPE,
        DONATION_STATUS,
        CHARITY_STATUS,
        ACCOUNT_STATUS,
        USER_ROLE,
    ):
        enum_type.drop(bind, checkfirst=True)
