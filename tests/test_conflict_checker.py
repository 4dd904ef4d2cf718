"""
Tests for conflict checker.
"""

from clinicslots.domain.conflict_checker import find_conflicts, has_conflict
from clinicslots.domain.models import Appointment

DATE = "2024-11-25"


def _appointment(start_time, duration=20, doctor_id="dr-1", date=DATE, **kwargs):
    return Appointment(doctor_id=doctor_id, date=date, start_time=start_time, duration=duration, **kwargs)


class TestHasConflict:
    """Tests for has_conflict."""

    def test_no_existing_appointments(self):
        assert not has_conflict(_appointment("09:00"), [])

    def test_partial_overlap_is_conflict(self):
        """09:10-09:30 overlaps 09:00-09:20."""
        existing = [_appointment("09:00")]

        assert has_conflict(_appointment("09:10"), existing)

    def test_adjacent_is_not_conflict(self):
        """09:20-09:40 starts exactly when 09:00-09:20 ends."""
        existing = [_appointment("09:00")]

        assert not has_conflict(_appointment("09:20"), existing)
        assert not has_conflict(_appointment("08:40"), existing)

    def test_candidate_enclosing_existing_is_conflict(self):
        existing = [_appointment("09:20", duration=10)]

        assert has_conflict(_appointment("09:00", duration=60), existing)

    def test_candidate_inside_existing_is_conflict(self):
        existing = [_appointment("09:00", duration=60)]

        assert has_conflict(_appointment("09:20", duration=10), existing)

    def test_identical_stored_copy_is_conflict(self):
        """A stored duplicate of the candidate is still a conflict (no self-exclusion)."""
        candidate = _appointment("10:00", duration=30)
        stored = candidate.with_changes(id="abc123", status="pending")

        assert has_conflict(candidate, [stored])

    def test_other_doctor_is_ignored(self):
        existing = [_appointment("09:00", doctor_id="dr-2")]

        assert not has_conflict(_appointment("09:00"), existing)

    def test_other_date_is_ignored(self):
        existing = [_appointment("09:00", date="2024-11-26")]

        assert not has_conflict(_appointment("09:00"), existing)

    def test_conflict_anywhere_in_list(self):
        existing = [
            _appointment("08:00"),
            _appointment("11:00"),
            _appointment("14:00", duration=40),
        ]

        assert has_conflict(_appointment("14:20"), existing)
        assert has_conflict(_appointment("14:20"), list(reversed(existing)))

    def test_accepts_generator(self):
        existing = (_appointment(start) for start in ("08:00", "09:00"))

        assert has_conflict(_appointment("09:10"), existing)


class TestFindConflicts:
    """Tests for find_conflicts."""

    def test_returns_all_overlapping(self):
        existing = [
            _appointment("09:00", id="a"),
            _appointment("09:20", id="b"),
            _appointment("10:00", id="c"),
        ]

        conflicts = find_conflicts(_appointment("09:10", duration=30), existing)

        assert [c.id for c in conflicts] == ["a", "b"]

    def test_agrees_with_has_conflict(self):
        existing = [_appointment("09:00"), _appointment("12:00", duration=45)]

        for start in ("08:40", "09:00", "09:20", "11:40", "12:30", "12:45"):
            candidate = _appointment(start)
            assert bool(find_conflicts(candidate, existing)) == has_conflict(candidate, existing)
