"""Unit tests for the pure domain rules: seat ledger, ride drafts, scores."""

from datetime import timedelta

import pytest

from ridesapp.domain.entities import (
    Location,
    SeatLedger,
    validate_score,
    validate_seats,
)
from ridesapp.domain.errors import ValidationError
from tests.factories import on_demand_draft, shared_draft


class TestSeatLedger:
    def test_remaining(self):
        assert SeatLedger(4, 1).remaining == 3

    def test_exact_fit_accommodated(self):
        ledger = SeatLedger(seats_available=2, seats_booked=1)
        assert ledger.can_accommodate(1)
        assert not ledger.can_accommodate(2)

    def test_book_then_release(self):
        ledger = SeatLedger(seats_available=3)
        ledger.book(2)
        assert ledger.seats_booked == 2
        assert ledger.release(2) is True
        assert ledger.seats_booked == 0

    def test_release_below_zero_is_clamped(self):
        ledger = SeatLedger(seats_available=3, seats_booked=1)
        assert ledger.release(2) is False
        assert ledger.seats_booked == 0

    def test_zero_capacity_takes_nobody(self):
        assert not SeatLedger(0).can_accommodate(1)


class TestRideDraft:
    def test_valid_shared_draft(self):
        shared_draft().validate()

    def test_valid_on_demand_draft_without_seats_or_departure(self):
        on_demand_draft().validate()

    @pytest.mark.parametrize("field", ["seats_available", "departure_time"])
    def test_shared_draft_requires_field(self, field):
        with pytest.raises(ValidationError, match=field):
            shared_draft(**{field: None}).validate()

    def test_missing_fields_are_all_listed(self):
        draft = on_demand_draft(price=None, pickup_address="")
        with pytest.raises(ValidationError) as excinfo:
            draft.validate()
        assert "price" in str(excinfo.value)
        assert "pickup_address" in str(excinfo.value)

    def test_shared_needs_at_least_one_seat(self):
        with pytest.raises(ValidationError):
            shared_draft(seats_available=0).validate()

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            on_demand_draft(price=-1.0).validate()

    def test_bad_coordinates_rejected(self):
        with pytest.raises(ValidationError, match="pickup latitude"):
            on_demand_draft(pickup=Location(91.0, 0.0)).validate()

    def test_past_departure_is_allowed(self):
        shared_draft(departure_in=-timedelta(hours=1)).validate()


class TestScoreAndSeats:
    @pytest.mark.parametrize("score", [1, 3, 5])
    def test_scores_in_range(self, score):
        validate_score(score)

    @pytest.mark.parametrize("score", [0, 6, -1])
    def test_scores_out_of_range(self, score):
        with pytest.raises(ValidationError):
            validate_score(score)

    @pytest.mark.parametrize("seats", [0, -2])
    def test_seats_must_be_positive(self, seats):
        with pytest.raises(ValidationError):
            validate_seats(seats)
