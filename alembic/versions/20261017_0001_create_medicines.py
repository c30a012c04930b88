"""create medicines table

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

_TEXT_COLUMNS = (
    "category",
    "name_of_medicine",
    "ema_product_number",
    "medicine_status",
    "opinion_status",
    "latest_procedure_affecting_product_information",
    "international_non_proprietary_name_inn_common_name",
    "active_substance",
    "therapeutic_area_mesh",
    "species_veterinary",
    "patient_safety",
    "atc_code_human",
    "atcvet_code_veterinary",
    "pharmacotherapeutic_group_human",
    "pharmacotherapeutic_group_veterinary",
    "therapeutic_indication",
    "accelerated_assessment",
    "additional_monitoring",
    "advanced_therapy",
    "biosimilar",
    "conditional_approval",
    "exceptional_circumstances",
    "generic_or_hybrid",
    "orphan_medicine",
    "prime_priority_medicine",
    "marketing_authorisation_developer_applicant_holder",
    "european_commission_decision_date",
    "start_of_rolling_review_date",
    "start_of_evaluation_date",
    "opinion_adopted_date",
    "withdrawal_of_application_date",
    "marketing_authorisation_date",
    "refusal_of_marketing_authorisation_date",
    "withdrawal_expiry_revocation_lapse_of_marketing_authorisation_date",
    "suspension_of_marketing_authorisation_date",
    "revision_number",
    "first_published_date",
    "last_updated_date",
    "medicine_url",
)


def upgrade() -> None:
    op.create_table(
        "medicines",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *(sa.Column(name, sa.Text(), nullable=True) for name in _TEXT_COLUMNS),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_medicines_category", "medicines", ["category"], unique=False)
    op.create_index("ix_medicines_medicine_status", "medicines", ["medicine_status"], unique=False)
    op.create_index(
        "ix_medicines_marketing_authorisation_date",
        "medicines",
        ["marketing_authorisation_date"],
        unique=False,
    )
    op.create_index("ix_medicines_last_updated_date", "medicines", ["last_updated_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_medicines_last_updated_date", table_name="medicines")
    op.drop_index("ix_medicines_marketing_authorisation_date", table_name="medicines")
    op.drop_index("ix_medicines_medicine_status", table_name="medicines")
    op.drop_index("ix_medicines_category", table_name="medicines")
    op.drop_table("medicines")
