"""Dispatch guard, failure reason and single-default index for review requests

Revision ID: 001_review_request_dispatch
Revises: None
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

from app.core.database import Base
from app import models  # noqa: F401  registers every table on Base.metadata

revision = '001_review_request_dispatch'
down_revision = None
branch_labels = None
depends_on = None


def _columns(bind, table):
    return {c["name"] for c in sa.inspect(bind).get_columns(table)}


def upgrade():
    bind = op.get_bind()

    # Fresh database: build every table first (no-op for tables that exist)
    Base.metadata.create_all(bind=bind)

    # Databases created before these columns existed
    existing = _columns(bind, "review_requests")
    if "dispatch_claimed_at" not in existing:
        op.add_column("review_requests", sa.Column("dispatch_claimed_at", sa.DateTime(timezone=True), nullable=True))
    if "error_message" not in existing:
        op.add_column("review_requests", sa.Column("error_message", sa.Text(), nullable=True))
    if "crm_integration_id" not in existing:
        op.add_column("review_requests", sa.Column(
            "crm_integration_id", sa.Integer(),
            sa.ForeignKey("crm_integrations.id", ondelete="SET NULL"),
            nullable=True,
        ))

    # Template delete is refused while a CRM rule uses it, instead of cascading
    if bind.dialect.name == "postgresql":
        op.execute("""
            ALTER TABLE crm_integrations DROP CONSTRAINT IF EXISTS crm_integrations_template_id_fkey;
            ALTER TABLE crm_integrations ADD CONSTRAINT crm_integrations_template_id_fkey
                FOREIGN KEY (template_id) REFERENCES review_templates(id) ON DELETE RESTRICT;
        """)

    # Collapse duplicate defaults left by the old two-step update (newest wins)
    op.execute("""
        UPDATE review_templates
        SET is_default = FALSE
        WHERE is_default
          AND EXISTS (
              SELECT 1 FROM review_templates newer
              WHERE newer.owner_id = review_templates.owner_id
                AND newer.template_type = review_templates.template_type
                AND newer.is_default
                AND newer.id > review_templates.id
          );
    """)

    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS uq_review_templates_default_per_type
        ON review_templates (owner_id, template_type)
        WHERE is_default;
    """)


def downgrade():
    op.execute("DROP INDEX IF EXISTS uq_review_templates_default_per_type;")
    existing = _columns(op.get_bind(), "review_requests")
    for column in ("dispatch_claimed_at", "error_message", "crm_integration_id"):
        if column in existing:
            op.drop_column("review_requests", column)
