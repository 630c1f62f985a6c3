"""
Initial schema: users, conversations, participants and messages.

Revision ID: 20260101_000000_initial_schema
Revises:
Create Date: 2026-01-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20260101_000000_initial_schema"
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


def upgrade() -> None:
    # users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_provider", sa.String(length=50), nullable=False),
        sa.Column("auth_subject", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "email_verified",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint(
            "auth_provider",
            "auth_subject",
            name="users_auth_provider_auth_subject_key",
        ),
        sa.UniqueConstraint("username", name="users_username_key"),
    )
    op.create_index("idx_users_auth", "users", ["auth_provider", "auth_subject"])

    # conversations (latest_message_id FK added once messages exists)
    op.create_table(
        "conversations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("latest_message_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="conversations_pkey"),
        sa.UniqueConstraint("latest_message_id", name="conversations_latest_message_id_key"),
    )
    op.create_index("idx_conversations_updated", "conversations", ["updated_at"])

    # conversation_participants
    op.create_table(
        "conversation_participants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "has_seen_latest_message",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["conversation_id"],
            ["conversations.id"],
            ondelete="CASCADE",
            name="conversation_participants_conversation_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="conversation_participants_user_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="conversation_participants_pkey"),
        sa.UniqueConstraint(
            "conversation_id",
            "user_id",
            name="conversation_participants_conversation_id_user_id_key",
        ),
    )
    op.create_index(
        "idx_conversation_participants_user", "conversation_participants", ["user_id"]
    )

    # messages
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["conversation_id"],
            ["conversations.id"],
            ondelete="CASCADE",
            name="messages_conversation_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["sender_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="messages_sender_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="messages_pkey"),
    )
    op.create_index(
        "idx_messages_conversation_created", "messages", ["conversation_id", "created_at"]
    )

    # batch mode recreates the table on SQLite, which has no ALTER ADD CONSTRAINT
    with op.batch_alter_table("conversations") as batch_op:
        batch_op.create_foreign_key(
            "conversations_latest_message_id_fkey",
            "messages",
            ["latest_message_id"],
            ["id"],
            ondelete="SET NULL",
        )


def downgrade() -> None:
    with op.batch_alter_table("conversations") as batch_op:
        batch_op.drop_constraint("conversations_latest_message_id_fkey", type_="foreignkey")
    op.drop_index("idx_messages_conversation_created", table_name="messages")
    op.drop_table("messages")
    op.drop_index("idx_conversation_participants_user", table_name="conversation_participants")
    op.drop_table("conversation_participants")
    op.drop_index("idx_conversations_updated", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("idx_users_auth", table_name="users")
    op.drop_table("users")
