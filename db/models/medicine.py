"""
db/models/medicine.py

One row of the EMA medicines report.

Every report attribute is stored as opaque nullable text; the report carries
dates and yes/no flags as free text and no coercion is applied on import.
Column names follow the normalized report headers.
"""

from __future__ import annotations

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class MedicineCategory:
    HUMAN = "Human"
    VETERINARY = "Veterinary"


class Medicine(Base):
    __tablename__ = "medicines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    category: Mapped[str | None] = mapped_column("category", Text, nullable=True)
    name_of_medicine: Mapped[str | None] = mapped_column("name_of_medicine", Text, nullable=True)
    ema_product_number: Mapped[str | None] = mapped_column("ema_product_number", Text, nullable=True)
    medicine_status: Mapped[str | None] = mapped_column("medicine_status", Text, nullable=True)
    opinion_status: Mapped[str | None] = mapped_column("opinion_status", Text, nullable=True)
    latest_procedure: Mapped[str | None] = mapped_column(
        "latest_procedure_affecting_product_information",
        Text,
        nullable=True,
    )
    inn: Mapped[str | None] = mapped_column(
        "international_non_proprietary_name_inn_common_name",
        Text,
        nullable=True,
    )
    active_substance: Mapped[str | None] = mapped_column("active_substance", Text, nullable=True)
    therapeutic_area: Mapped[str | None] = mapped_column("therapeutic_area_mesh", Text, nullable=True)
    species_veterinary: Mapped[str | None] = mapped_column("species_veterinary", Text, nullable=True)
    patient_safety: Mapped[str | None] = mapped_column("patient_safety", Text, nullable=True)
    atc_code_human: Mapped[str | None] = mapped_column("atc_code_human", Text, nullable=True)
    atc_vet_code: Mapped[str | None] = mapped_column("atcvet_code_veterinary", Text, nullable=True)
    pharmacotherapeutic_group_human: Mapped[str | None] = mapped_column(
        "pharmacotherapeutic_group_human",
        Text,
        nullable=True,
    )
    pharmacotherapeutic_group_vet: Mapped[str | None] = mapped_column(
        "pharmacotherapeutic_group_veterinary",
        Text,
        nullable=True,
    )
    therapeutic_indication: Mapped[str | None] = mapped_column(
        "therapeutic_indication",
        Text,
        nullable=True,
    )

    # Yes/no flags, kept as the report spells them.
    accelerated_assessment: Mapped[str | None] = mapped_column("accelerated_assessment", Text, nullable=True)
    additional_monitoring: Mapped[str | None] = mapped_column("additional_monitoring", Text, nullable=True)
    advanced_therapy: Mapped[str | None] = mapped_column("advanced_therapy", Text, nullable=True)
    biosimilar: Mapped[str | None] = mapped_column("biosimilar", Text, nullable=True)
    conditional_approval: Mapped[str | None] = mapped_column("conditional_approval", Text, nullable=True)
    exceptional_circumstances: Mapped[str | None] = mapped_column(
        "exceptional_circumstances",
        Text,
        nullable=True,
    )
    generic_or_hybrid: Mapped[str | None] = mapped_column("generic_or_hybrid", Text, nullable=True)
    orphan_medicine: Mapped[str | None] = mapped_column("orphan_medicine", Text, nullable=True)
    prime_priority_medicine: Mapped[str | None] = mapped_column(
        "prime_priority_medicine",
        Text,
        nullable=True,
    )

    marketing_authorisation_developer: Mapped[str | None] = mapped_column(
        "marketing_authorisation_developer_applicant_holder",
        Text,
        nullable=True,
    )

    # Dates, stored as report text and compared lexically.
    commission_decision_date: Mapped[str | None] = mapped_column(
        "european_commission_decision_date",
        Text,
        nullable=True,
    )
    start_rolling_review_date: Mapped[str | None] = mapped_column(
        "start_of_rolling_review_date",
        Text,
        nullable=True,
    )
    start_evaluation_date: Mapped[str | None] = mapped_column("start_of_evaluation_date", Text, nullable=True)
    opinion_adopted_date: Mapped[str | None] = mapped_column("opinion_adopted_date", Text, nullable=True)
    withdrawal_application_date: Mapped[str | None] = mapped_column(
        "withdrawal_of_application_date",
        Text,
        nullable=True,
    )
    marketing_authorisation_date: Mapped[str | None] = mapped_column(
        "marketing_authorisation_date",
        Text,
        nullable=True,
    )
    refusal_marketing_authorisation_date: Mapped[str | None] = mapped_column(
        "refusal_of_marketing_authorisation_date",
        Text,
        nullable=True,
    )
    withdrawal_expiry_revocation_date: Mapped[str | None] = mapped_column(
        "withdrawal_expiry_revocation_lapse_of_marketing_authorisation_date",
        Text,
        nullable=True,
    )
    suspension_marketing_authorisation_date: Mapped[str | None] = mapped_column(
        "suspension_of_marketing_authorisation_date",
        Text,
        nullable=True,
    )

    revision_number: Mapped[str | None] = mapped_column("revision_number", Text, nullable=True)
    first_published_date: Mapped[str | None] = mapped_column("first_published_date", Text, nullable=True)
    last_updated_date: Mapped[str | None] = mapped_column("last_updated_date", Text, nullable=True)
    medicine_url: Mapped[str | None] = mapped_column("medicine_url", Text, nullable=True)

    __table_args__ = (
        Index("ix_medicines_category", "category"),
        Index("ix_medicines_medicine_status", "medicine_status"),
        Index("ix_medicines_marketing_authorisation_date", "marketing_authorisation_date"),
        Index("ix_medicines_last_updated_date", "last_updated_date"),
    )
