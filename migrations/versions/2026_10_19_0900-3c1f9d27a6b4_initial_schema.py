"""initial_schema

Revision ID: 3c1f9d27a6b4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3c1f9d27a6b4"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _wedding_fk() -> sa.Column:
    return sa.Column(
        "wedding_id",
        sa.UUID(),
        sa.ForeignKey("weddings.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    op.create_table(
        "weddings",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("couple_name", sa.String(length=255), nullable=True),
        sa.Column("website_url", sa.String(length=500), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "guests",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column("first_name", sa.String(length=255), nullable=False, index=True),
        sa.Column("last_name", sa.String(length=255), nullable=False, index=True),
        sa.Column("email", sa.String(length=255), nullable=True, index=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_vip", sa.Boolean(), nullable=False),
        sa.Column("total_guests", sa.Integer(), nullable=False),
        sa.Column("invite_code", sa.String(length=20), nullable=True, unique=True, index=True),
        sa.Column("household_id", sa.UUID(), nullable=True, index=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "events",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        *_timestamps(),
    )

    # guest_id is unique: one invitation per guest
    op.create_table(
        "invitations",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column(
            "guest_id",
            sa.UUID(),
            sa.ForeignKey("guests.uuid", ondelete="CASCADE"),
            nullable=False,
            unique=True,
            index=True,
        ),
        sa.Column("token", sa.String(length=64), nullable=False, unique=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        "invitation_events",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column(
            "invitation_id",
            sa.UUID(),
            sa.ForeignKey("invitations.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "event_id",
            sa.UUID(),
            sa.ForeignKey("events.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "accepted", "declined", "waitlist", name="invitation_status_enum"),
            nullable=False,
        ),
        sa.Column("headcount", sa.Integer(), nullable=False),
        sa.Column("event_token", sa.String(length=64), nullable=False, unique=True, index=True),
        sa.Column("dietary_restrictions", sa.Text(), nullable=True),
        sa.Column("dietary_information", sa.Text(), nullable=True),
        sa.Column("food_choice", sa.String(length=100), nullable=True),
        sa.Column("guest_details", sa.JSON(), nullable=True),
        sa.Column("goodwill_message", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("invitation_id", "event_id", name="uq_invitation_events_invitation_event"),
    )

    op.create_table(
        "rsvps_v2",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column(
            "invitation_event_id",
            sa.UUID(),
            sa.ForeignKey("invitation_events.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("response", sa.Enum("accepted", "declined", name="rsvp_response_enum"), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )

    op.create_table(
        "wedding_config",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("wedding_id", "key", name="uq_wedding_config_key"),
    )

    op.create_table(
        "mail_logs",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        _wedding_fk(),
        sa.Column("token", sa.String(length=64), nullable=False, index=True),
        sa.Column(
            "channel",
            sa.Enum("email", "sms", "whatsapp", name="delivery_channel_enum"),
            nullable=False,
        ),
        sa.Column("recipient", sa.String(length=255), nullable=True),
        sa.Column("message_id", sa.String(length=255), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )

    # no FK: audit rows outlive the wedding they describe
    op.create_table(
        "audit_logs",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("wedding_id", sa.UUID(), nullable=True, index=True),
        sa.Column("action", sa.String(length=100), nullable=False, index=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("mail_logs")
    op.drop_table("wedding_config")
    op.drop_table("rsvps_v2")
    op.drop_table("invitation_events")
    op.drop_table("invitations")
    op.drop_table("events")
    op.drop_table("guests")
    op.drop_table("weddings")
    sa.Enum(name="delivery_channel_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="rsvp_response_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="invitation_status_enum").drop(op.get_bind(), checkfirst=True)
