from roulette_sync.models import Candidate
from roulette_sync.reconcile import reconcile


def _cands(source: str, *ids: int) -> list[Candidate]:
    return [Candidate(i, f"Achievement {i}", source) for i in ids]


def test_longest_list_wins_regardless_of_order() -> None:
    page = ("event_page", {5: _cands("event_page", 1, 2)})
    forum = ("forum", {5: _cands("forum", 1, 2, 3)})

    for ordering in ([page, forum], [forum, page]):
        merged = reconcile(ordering)
        assert [c.achievement_id for c in merged[5]] == [1, 2, 3]
        assert merged[5][0].source == "forum"


def test_tie_keeps_first_source() -> None:
    merged = reconcile(
        [
            ("event_page", {1: _cands("event_page", 1, 2, 3)}),
            ("forum", {1: _cands("forum", 7, 8, 9)}),
        ]
    )
    assert [c.achievement_id for c in merged[1]] == [1, 2, 3]


def test_lists_are_truncated_before_comparing() -> None:
    merged = reconcile(
        [
            ("event_page", {1: _cands("event_page", 1, 2, 3)}),
            ("forum", {1: _cands("forum", 7, 8, 9, 10, 11)}),
        ]
    )
    # Both are 3 long after truncation, so the first source is kept.
    assert [c.achievement_id for c in merged[1]] == [1, 2, 3]


def test_truncation_keeps_discovery_order() -> None:
    merged = reconcile([("forum", {2: _cands("forum", 9, 4, 7, 1)})])
    assert [c.achievement_id for c in merged[2]] == [9, 4, 7]


def test_week_filter() -> None:
    merged = reconcile(
        [("forum", {1: _cands("forum", 1), 2: _cands("forum", 2), 3: _cands("forum", 3)})],
        weeks={2, 3},
    )
    assert list(merged) == [2, 3]


def test_weeks_from_different_sources_are_merged_and_sorted() -> None:
    merged = reconcile(
        [
            ("event_page", {4: _cands("event_page", 41, 42, 43)}),
            ("forum", {1: _cands("forum", 11), 4: _cands("forum", 41)}),
            ("event_game", {2: _cands("event_game", 21, 22)}),
        ]
    )
    assert list(merged) == [1, 2, 4]
    assert merged[4][0].source == "event_page"


def test_empty_inputs() -> None:
    assert reconcile([]) == {}
    assert reconcile([("forum", {}), ("event_page", {1: []})]) == {}


def test_custom_slot_count() -> None:
    merged = reconcile([("forum", {1: _cands("forum", 1, 2, 3)})], slots=2)
    assert [c.achievement_id for c in merged[1]] == [1, 2]
