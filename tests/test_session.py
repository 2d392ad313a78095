"""Tests for session state and stale fetch handling."""

from __future__ import annotations

from car_dashboard.data.filters import apply_filters, update_criteria
from car_dashboard.data.models import FilterCriteria
from car_dashboard.data.session import ListingSession
from car_dashboard.errors import FetchError


class TestListingSession:
    def test_latest_fetch_is_installed(self, sample_records):
        session = ListingSession(criteria=FilterCriteria())
        ticket = session.begin_fetch()
        assert session.complete_fetch(ticket, sample_records) is True
        assert session.records == sample_records
        assert session.loaded is True

    def test_older_fetch_is_discarded(self, sample_records, record_factory):
        session = ListingSession(criteria=FilterCriteria())
        first = session.begin_fetch()
        second = session.begin_fetch()
        newer = [record_factory(make="Honda")]
        assert session.complete_fetch(second, newer) is True
        assert session.complete_fetch(first, sample_records) is False
        assert session.records == newer

    def test_response_for_old_criteria_is_discarded(self, sample_records):
        session = ListingSession(criteria=FilterCriteria(make="Ford"))
        ticket = session.begin_fetch()
        session.set_criteria(FilterCriteria(make="Honda"))
        assert session.complete_fetch(ticket, sample_records) is False
        assert session.records == []

    def test_ticket_carries_explicit_criteria(self):
        session = ListingSession(criteria=FilterCriteria())
        ticket = session.begin_fetch(FilterCriteria(make="Ford"))
        assert ticket.criteria.make == "Ford"
        assert session.is_current(ticket) is False

    def test_failure_keeps_last_good_records(self, sample_records):
        session = ListingSession(criteria=FilterCriteria())
        session.complete_fetch(session.begin_fetch(), sample_records)

        ticket = session.begin_fetch()
        error = FetchError("timeout")
        assert session.fail_fetch(ticket, error) is True
        assert session.records == sample_records
        assert session.error is error

    def test_success_clears_error(self, sample_records):
        session = ListingSession(criteria=FilterCriteria())
        session.fail_fetch(session.begin_fetch(), FetchError("down"))
        session.complete_fetch(session.begin_fetch(), sample_records)
        assert session.error is None

    def test_stale_failure_is_ignored(self, sample_records):
        session = ListingSession(criteria=FilterCriteria())
        stale = session.begin_fetch()
        session.complete_fetch(session.begin_fetch(), sample_records)
        assert session.fail_fetch(stale, FetchError("late")) is False
        assert session.error is None

    def test_reset_clears_records_and_invalidates_tickets(self, sample_records):
        session = ListingSession(criteria=FilterCriteria(make="Ford"))
        pending = session.begin_fetch()
        session.complete_fetch(session.begin_fetch(), sample_records)

        session.reset(FilterCriteria())
        assert session.records == []
        assert session.loaded is False
        assert session.criteria == FilterCriteria()
        assert session.complete_fetch(pending, sample_records) is False

    def test_failed_fetch_keeps_last_view_visible(self, record_factory):
        fords = [
            record_factory(make="Ford", model="F-150", mileage=20000),
            record_factory(make="Ford", model="Focus", mileage=90000),
        ]
        session = ListingSession(criteria=FilterCriteria(make="Ford"))
        session.complete_fetch(session.begin_fetch(), fords)

        session.set_criteria(update_criteria(session.criteria, "make", "Honda"))
        session.fail_fetch(session.begin_fetch(), FetchError("timeout"))

        view = session.display_criteria()
        assert view.make == "Ford"
        assert apply_filters(session.records, view) == fords

    def test_failed_fetch_still_applies_in_memory_filters(self, record_factory):
        fords = [
            record_factory(make="Ford", model="F-150", mileage=20000),
            record_factory(make="Ford", model="Focus", mileage=90000),
        ]
        session = ListingSession(criteria=FilterCriteria(make="Ford"))
        session.complete_fetch(session.begin_fetch(), fords)

        changed = update_criteria(session.criteria, "make", "Honda")
        session.set_criteria(update_criteria(changed, "mileage", 50000))
        session.fail_fetch(session.begin_fetch(), FetchError("timeout"))

        view = session.display_criteria()
        assert view.mileage == 50000
        assert [r.model for r in apply_filters(session.records, view)] == ["F-150"]

    def test_successful_fetch_displays_current_criteria(self, sample_records):
        session = ListingSession(criteria=FilterCriteria())
        session.complete_fetch(session.begin_fetch(), sample_records)
        session.set_criteria(FilterCriteria(make="Honda"))
        session.complete_fetch(session.begin_fetch(), sample_records)
        assert session.display_criteria() == FilterCriteria(make="Honda")

    def test_failure_before_any_load_uses_current_criteria(self):
        session = ListingSession(criteria=FilterCriteria(make="Honda"))
        session.fail_fetch(session.begin_fetch(), FetchError("down"))
        assert session.display_criteria() == session.criteria
