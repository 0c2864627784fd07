"""Initial schema: users, rides, ride_passengers, ratings.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

RIDE_STATUS = ("pending", "accepted", "started", "completed", "cancelled")


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("profile_picture", sa.String(512), nullable=True),
        sa.Column(
            "role",
            sa.Enum("rider", "driver", name="userrole"),
            nullable=False,
        ),
        sa.Column("rating", sa.Float, default=5.0),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("license_number", sa.String(64), nullable=True),
        sa.Column("vehicle_model", sa.String(120), nullable=True),
        sa.Column("vehicle_color", sa.String(64), nullable=True),
        sa.Column("vehicle_plate", sa.String(32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_type",
            sa.Enum("shared", "on_demand", name="ridetype"),
            nullable=False,
        ),
        sa.Column(
            "rider_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True
        ),
        sa.Column("pickup_lat", sa.Float, nullable=False),
        sa.Column("pickup_lng", sa.Float, nullable=False),
        sa.Column("dropoff_lat", sa.Float, nullable=False),
        sa.Column("dropoff_lng", sa.Float, nullable=False),
        sa.Column("pickup_address", sa.String(255), nullable=False),
        sa.Column("dropoff_address", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*RIDE_STATUS, name="ridestatus"),
            nullable=False,
        ),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("distance", sa.Float, nullable=False),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("seats_available", sa.Integer, nullable=False, server_default="0"),
        sa.Column("seats_booked", sa.Integer, nullable=False, server_default="0"),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "payment_method",
            sa.Enum("cash", "card", "wallet", name="paymentmethod"),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "seats_booked >= 0 AND seats_booked <= seats_available",
            name="ck_rides_seats_booked_range",
        ),
    )
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_rider", "rides", ["rider_id"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_type_status", "rides", ["ride_type", "status"])

    # ── ride_passengers ───────────────────────────────────────────────
    op.create_table(
        "ride_passengers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_id", sa.Integer, sa.ForeignKey("rides.id"), nullable=False
        ),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("seats", sa.Integer, nullable=False),
        sa.Column(
            "status",
            sa.Enum("requested", "confirmed", name="passengerstatus"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("seats >= 1", name="ck_ride_passengers_seats_positive"),
    )
    op.create_index("idx_ride_passengers_ride", "ride_passengers", ["ride_id"])
    op.create_index("idx_ride_passengers_user", "ride_passengers", ["user_id"])

    # ── ratings ───────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_id", sa.Integer, sa.ForeignKey("rides.id"), nullable=False
        ),
        sa.Column(
            "from_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "to_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("score BETWEEN 1 AND 5", name="ck_ratings_score_range"),
    )
    op.create_index("idx_ratings_ride", "ratings", ["ride_id"])


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("ride_passengers")
    op.drop_table("rides")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS passengerstatus")
    op.execute("DROP TYPE IF EXISTS paymentmethod")
    op.execute("DROP TYPE IF EXISTS ridestatus")
    op.execute("DROP TYPE IF EXISTS ridetype")
    op.execute("DROP TYPE IF EXISTS userrole")
