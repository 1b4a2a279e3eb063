"""Tests for filtering, search and sorting of the presented sequence."""

from datetime import date, datetime, timedelta

from tickoff.engine.views import (
    ViewParams,
    collect_tags,
    collation_key,
    filter_by_category,
    filter_by_status,
    filter_by_tags,
    matches_search,
    present,
    sort_tasks,
)
from tickoff.models.task import FilterType, SortType

FIXED_NOW = datetime(2026, 10, 14, 12, 0, 0)


class TestFilters:
    """Status, category and tag filters."""

    def test_active_and_completed_partition_all(self, make_task):
        tasks = [make_task(completed=i % 3 == 0, title=f"T{i}") for i in range(7)]

        active = filter_by_status(tasks, FilterType.ACTIVE)
        completed = filter_by_status(tasks, FilterType.COMPLETED)
        everything = filter_by_status(tasks, FilterType.ALL)

        assert len(active) + len(completed) == len(everything) == 7
        assert {t.id for t in active}.isdisjoint({t.id for t in completed})
        assert {t.id for t in active} | {t.id for t in completed} == {t.id for t in tasks}

    def test_category_filter_matches_exactly(self, make_task):
        work = make_task(category_id="work")
        tasks = [work, make_task(category_id="workshop"), make_task(category_id=None)]

        assert filter_by_category(tasks, "work") == [work]
        assert filter_by_category(tasks, None) == tasks

    def test_tag_filter_is_logical_or(self, make_task):
        a = make_task(tags=["home"])
        b = make_task(tags=["errand", "car"])
        c = make_task(tags=["work"])

        assert filter_by_tags([a, b, c], ["home", "car"]) == [a, b]
        assert filter_by_tags([a, b, c], []) == [a, b, c]


class TestSearch:
    """Case-insensitive substring search."""

    def test_matches_title_description_or_tag(self, make_task):
        task = make_task(title="Pay Rent", description="Landlord account", tags=["Finance"])

        assert matches_search(task, "rent")
        assert matches_search(task, "LANDLORD")
        assert matches_search(task, "fin")
        assert not matches_search(task, "groceries")

    def test_empty_query_matches_everything(self, make_task):
        tasks = [make_task(title="A"), make_task(title="B", completed=True)]

        view = ViewParams(filter=FilterType.ACTIVE, search_query="")
        assert present(tasks, view) == filter_by_status(tasks, FilterType.ACTIVE)

    def test_query_without_match_returns_nothing(self, make_task):
        tasks = [make_task(title="A", description=None), make_task(title="B", tags=["x"])]

        assert present(tasks, ViewParams(search_query="zzz")) == []

    def test_missing_description_does_not_match(self, make_task):
        assert not matches_search(make_task(title="A", description=None), "none")


class TestSorting:
    """Sort keys for the presented sequence."""

    def test_priority_date_and_name_scenario(self, make_task):
        a = make_task(title="A", priority="low", created_at=FIXED_NOW - timedelta(hours=1))
        b = make_task(title="B", priority="high", created_at=FIXED_NOW)

        assert [t.title for t in sort_tasks([a, b], SortType.PRIORITY)] == ["B", "A"]
        assert [t.title for t in sort_tasks([a, b], SortType.DATE)] == ["B", "A"]
        assert [t.title for t in sort_tasks([a, b], SortType.NAME)] == ["A", "B"]

    def test_priority_order_is_high_medium_low(self, make_task):
        tasks = [make_task(priority=p) for p in ["low", "medium", "high", "medium"]]

        assert [t.priority for t in sort_tasks(tasks, SortType.PRIORITY)] == ["high", "medium", "medium", "low"]

    def test_due_date_puts_undated_last_and_stable(self, make_task):
        undated_1 = make_task(title="u1")
        later = make_task(title="later", due_date=date(2026, 11, 1))
        undated_2 = make_task(title="u2")
        sooner = make_task(title="sooner", due_date=date(2026, 10, 20))

        ordered = sort_tasks([undated_1, later, undated_2, sooner], SortType.DUE_DATE)
        assert [t.title for t in ordered] == ["sooner", "later", "u1", "u2"]

    def test_date_sort_is_stable_for_equal_timestamps(self, make_task):
        tasks = [make_task(title=str(i), created_at=FIXED_NOW) for i in range(4)]

        assert sort_tasks(tasks, SortType.DATE) == tasks

    def test_name_sort_is_locale_aware_and_idempotent(self, make_task):
        tasks = [make_task(title=t) for t in ["banana", "Apple", "éclair", "apple", "Zebra", "eagle"]]

        once = sort_tasks(tasks, SortType.NAME)
        twice = sort_tasks(once, SortType.NAME)

        assert [t.title for t in once] == ["apple", "Apple", "banana", "eagle", "éclair", "Zebra"]
        assert once == twice

    def test_collation_ignores_case_and_accents_first(self):
        assert collation_key("école") < collation_key("ecole2")
        assert collation_key("a") < collation_key("B")


class TestPresentAndTags:
    """Combined pipeline and tag collection."""

    def test_present_applies_every_filter_then_sorts(self, make_task):
        keep_1 = make_task(title="b milk", category_id="shopping", tags=["food"])
        keep_2 = make_task(title="a bread", category_id="shopping", tags=["food"])
        done = make_task(title="c eggs", category_id="shopping", tags=["food"], completed=True)
        other_cat = make_task(title="d milk", category_id="work", tags=["food"])

        view = ViewParams(
            filter=FilterType.ACTIVE,
            sort=SortType.NAME,
            selected_category="shopping",
            selected_tags=["food"],
        )
        assert present([keep_1, done, other_cat, keep_2], view) == [keep_2, keep_1]

    def test_collect_tags_first_seen_order(self, make_task):
        tasks = [make_task(tags=["b", "a"]), make_task(tags=["a", "c"]), make_task(tags=[])]

        assert collect_tags(tasks) == ["b", "a", "c"]
