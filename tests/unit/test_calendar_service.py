"""Unit tests for the calendar month projection."""

from datetime import date

import pytest

from chorecal.domain.chore import ChoreStatus, RecurrenceSpec, RecurrenceType, WeekDay
from chorecal.services import chore_service
from chorecal.services.calendar_service import filter_chores, get_calendar_chores, month_bounds, project_month


@pytest.mark.unit
class TestMonthBounds:
    """Tests for month_bounds."""

    def test_january(self):
        assert month_bounds(2026, 1) == (date(2026, 1, 1), date(2026, 1, 31))

    def test_leap_february(self):
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))


@pytest.mark.unit
class TestFilterChores:
    """Tests for filter_chores."""

    def test_assignee_and_status(self, make_chore):
        chores = [
            make_chore(id="a", assignee_id="tm-1", status=ChoreStatus.PENDING),
            make_chore(id="b", assignee_id="tm-2", status=ChoreStatus.PENDING),
            make_chore(id="c", assignee_id="tm-1", status=ChoreStatus.COMPLETED),
        ]

        result = filter_chores(chores, assignee_id="tm-1", statuses=[ChoreStatus.PENDING])

        assert [c.id for c in result] == ["a"]

    def test_no_filters_keeps_everything(self, make_chore):
        chores = [make_chore(id="a"), make_chore(id="b")]
        assert filter_chores(chores) == chores


@pytest.mark.unit
class TestProjectMonth:
    """Tests for project_month."""

    def test_regular_chores_inside_month_only(self, make_chore):
        chores = [
            make_chore(id="in", due_date=date(2026, 1, 15)),
            make_chore(id="before", due_date=date(2025, 12, 31)),
            make_chore(id="after", due_date=date(2026, 2, 1)),
        ]

        result = project_month(chores, 2026, 1)

        assert [c.id for c in result] == ["in"]

    def test_anchor_and_virtuals(self, make_anchor):
        anchor = make_anchor()

        result = project_month([anchor], 2026, 1)

        assert len(result) == 12
        assert result[0].id == anchor.id
        assert [c.due_date for c in result[1:]] == [date(2026, 1, d) for d in range(21, 32)]
        assert all(c.is_recurrence_instance for c in result[1:])

    def test_anchor_outside_month_contributes_virtuals_only(self, make_anchor):
        anchor = make_anchor(due_date=date(2025, 12, 20))

        result = project_month([anchor], 2026, 1)

        assert len(result) == 31
        assert anchor.id not in [c.id for c in result]

    def test_persisted_instance_shadows_virtual(self, make_anchor, make_chore):
        anchor = make_anchor()
        persisted = make_chore(
            id="chore-persisted",
            due_date=date(2026, 1, 22),
            status=ChoreStatus.COMPLETED,
            parent_chore_id=anchor.id,
            is_recurrence_instance=True,
        )

        result = project_month([anchor, persisted], 2026, 1)

        on_22nd = [c for c in result if c.due_date == date(2026, 1, 22)]
        assert [c.id for c in on_22nd] == ["chore-persisted"]
        assert len(result) == 12

    def test_persisted_instance_not_duplicated_as_regular(self, make_chore):
        orphan = make_chore(
            id="chore-orphan",
            due_date=date(2026, 1, 10),
            parent_chore_id="chore-gone",
            is_recurrence_instance=True,
        )

        result = project_month([orphan], 2026, 1)

        assert [c.id for c in result] == ["chore-orphan"]

    def test_filtered_out_anchor_contributes_no_virtuals(self, make_anchor):
        anchor = make_anchor(assignee_id="tm-2")

        assert project_month([anchor], 2026, 1, assignee_id="tm-1") == []

    def test_status_filter_applies_before_expansion(self, make_anchor, make_chore):
        anchor = make_anchor()
        done = make_chore(
            id="chore-done",
            due_date=date(2026, 1, 25),
            status=ChoreStatus.COMPLETED,
            parent_chore_id=anchor.id,
            is_recurrence_instance=True,
        )

        result = project_month([anchor, done], 2026, 1, statuses=[ChoreStatus.COMPLETED])

        assert [c.id for c in result] == ["chore-done"]

    def test_sorted_by_due_date(self, make_anchor, make_chore):
        spec = RecurrenceSpec(type=RecurrenceType.WEEKLY, by_week_day=[WeekDay.MO])
        chores = [
            make_chore(id="late", due_date=date(2026, 1, 30)),
            make_anchor(spec, due_date=date(2026, 1, 5)),
            make_chore(id="early", due_date=date(2026, 1, 2)),
        ]

        result = project_month(chores, 2026, 1)

        dates = [c.due_date for c in result]
        assert dates == sorted(dates)
        assert result[0].id == "early"
        assert result[-1].id == "late"


@pytest.mark.unit
class TestGetCalendarChores:
    """Tests for get_calendar_chores against a store."""

    async def test_projects_stored_chores(self, in_memory_db):
        anchor = await chore_service.create_chore(
            in_memory_db,
            title="Water plants",
            due_date=date(2026, 1, 28),
            recurrence=RecurrenceSpec(type=RecurrenceType.DAILY),
        )
        await chore_service.create_chore(in_memory_db, title="Pay rent", due_date=date(2026, 2, 1))
        await chore_service.update_chore_status(
            in_memory_db, f"{anchor.id}::instance::2026-02-03", ChoreStatus.COMPLETED
        )

        result = await get_calendar_chores(in_memory_db, year=2026, month=2)

        assert len(result) == 29
        assert result[0].title == "Pay rent"
        on_3rd = [c for c in result if c.due_date == date(2026, 2, 3)]
        assert len(on_3rd) == 1
        assert on_3rd[0].status == ChoreStatus.COMPLETED
        assert "::instance::" not in on_3rd[0].id
