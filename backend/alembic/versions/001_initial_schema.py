"""initial schema - lookups, persons, functional records, absences, shifts, per diem, weapons, users

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def _index_is_active(table: str) -> None:
    op.create_index(op.f(f"ix_{table}_is_active"), table, ["is_active"], unique=False)


def upgrade() -> None:
    # ---------- lookups ----------
    op.create_table(
        "states",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("abbreviation", sa.String(2), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("states")

    op.create_table(
        "municipalities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("state_id", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["state_id"], ["states.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("municipalities")
    op.create_index(op.f("ix_municipalities_state_id"), "municipalities", ["state_id"], unique=False)

    op.create_table(
        "document_types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("document_types")

    op.create_table(
        "positions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("abbreviation", sa.String(10), nullable=True),
        sa.Column("weekly_hours", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("positions")

    op.create_table(
        "organizational_units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("abbreviation", sa.String(20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("municipality_id", sa.Integer(), nullable=True),
        sa.Column("parent_unit_id", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["municipality_id"], ["municipalities.id"]),
        sa.ForeignKeyConstraint(["parent_unit_id"], ["organizational_units.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("organizational_units")
    op.create_index(op.f("ix_organizational_units_parent_unit_id"), "organizational_units", ["parent_unit_id"], unique=False)

    op.create_table(
        "absence_types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requires_document", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("absence_types")

    op.create_table(
        "shift_types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("hours", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("shift_types")

    op.create_table(
        "per_diem_statuses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_per_diem_statuses_name"),
    )
    _index_is_active("per_diem_statuses")

    op.create_table(
        "weapon_types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("caliber", sa.String(50), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("weapon_types")

    # ---------- people ----------
    op.create_table(
        "persons",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("national_id", sa.String(11), nullable=False),
        sa.Column("secondary_id", sa.String(20), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("sex", sa.String(1), nullable=False),
        sa.Column("marital_status", sa.String(20), nullable=True),
        sa.Column("father_name", sa.String(200), nullable=True),
        sa.Column("mother_name", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("municipality_id", sa.Integer(), nullable=True),
        sa.Column("postal_code", sa.String(8), nullable=True),
        sa.Column("person_type", sa.String(1), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["municipality_id"], ["municipalities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("national_id", name="uq_persons_national_id"),
    )
    _index_is_active("persons")
    op.create_index(op.f("ix_persons_full_name"), "persons", ["full_name"], unique=False)
    op.create_index(op.f("ix_persons_person_type"), "persons", ["person_type"], unique=False)

    op.create_table(
        "functional_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("registration_number", sa.String(30), nullable=False),
        sa.Column("position_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=True),
        sa.Column("possession_date", sa.Date(), nullable=False),
        sa.Column("duty_start_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.ForeignKeyConstraint(["position_id"], ["positions.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["organizational_units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("registration_number", name="uq_functional_records_registration_number"),
    )
    _index_is_active("functional_records")
    op.create_index(op.f("ix_functional_records_person_id"), "functional_records", ["person_id"], unique=False)
    op.create_index(op.f("ix_functional_records_unit_id"), "functional_records", ["unit_id"], unique=False)

    op.create_table(
        "bank_accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("bank", sa.String(100), nullable=False),
        sa.Column("branch", sa.String(10), nullable=False),
        sa.Column("account", sa.String(20), nullable=False),
        sa.Column("account_type", sa.String(20), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("bank_accounts")
    op.create_index(op.f("ix_bank_accounts_person_id"), "bank_accounts", ["person_id"], unique=False)

    # ---------- attendance ----------
    op.create_table(
        "absences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("absence_type_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("process_number", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.ForeignKeyConstraint(["absence_type_id"], ["absence_types.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("absences")
    op.create_index(op.f("ix_absences_person_id"), "absences", ["person_id"], unique=False)

    op.create_table(
        "shift_schedules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("shift_type_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("shift_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.ForeignKeyConstraint(["shift_type_id"], ["shift_types.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["organizational_units.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("shift_schedules")
    op.create_index(op.f("ix_shift_schedules_person_id"), "shift_schedules", ["person_id"], unique=False)
    op.create_index(op.f("ix_shift_schedules_unit_id"), "shift_schedules", ["unit_id"], unique=False)
    op.create_index(op.f("ix_shift_schedules_shift_date"), "shift_schedules", ["shift_date"], unique=False)

    # ---------- per diem ----------
    op.create_table(
        "per_diem_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("status_id", sa.Integer(), nullable=False),
        sa.Column("destination", sa.String(200), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("transport_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("process_number", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.ForeignKeyConstraint(["status_id"], ["per_diem_statuses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("per_diem_requests")
    op.create_index(op.f("ix_per_diem_requests_person_id"), "per_diem_requests", ["person_id"], unique=False)
    op.create_index(op.f("ix_per_diem_requests_status_id"), "per_diem_requests", ["status_id"], unique=False)

    # ---------- weapons ----------
    op.create_table(
        "weapons",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("serial_number", sa.String(50), nullable=False),
        sa.Column("weapon_type_id", sa.Integer(), nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("manufacture_year", sa.Integer(), nullable=True),
        sa.Column("situation", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["weapon_type_id"], ["weapon_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("serial_number", name="uq_weapons_serial_number"),
    )
    _index_is_active("weapons")
    op.create_index(op.f("ix_weapons_weapon_type_id"), "weapons", ["weapon_type_id"], unique=False)
    op.create_index(op.f("ix_weapons_situation"), "weapons", ["situation"], unique=False)

    op.create_table(
        "weapon_checkouts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("weapon_id", sa.Integer(), nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("checked_out_at", sa.DateTime(), nullable=False),
        sa.Column("returned_at", sa.DateTime(), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["weapon_id"], ["weapons.id"]),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    _index_is_active("weapon_checkouts")
    op.create_index(op.f("ix_weapon_checkouts_weapon_id"), "weapon_checkouts", ["weapon_id"], unique=False)
    op.create_index(op.f("ix_weapon_checkouts_person_id"), "weapon_checkouts", ["person_id"], unique=False)

    # ---------- login identities ----------
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(200), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )


def downgrade() -> None:
    for table in (
        "users",
        "weapon_checkouts",
        "weapons",
        "per_diem_requests",
        "shift_schedules",
        "absences",
        "bank_accounts",
        "functional_records",
        "persons",
        "weapon_types",
        "per_diem_statuses",
        "shift_types",
        "absence_types",
        "organizational_units",
        "positions",
        "document_types",
        "municipalities",
        "states",
    ):
        op.drop_table(table)
