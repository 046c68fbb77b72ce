"""
Unit tests for filtering, categories and continue watching.
"""

from staffacademy.library import (
    continue_watching, filter_videos, list_categories, related_videos
)


def _titles(videos):
    return [v.title for v in videos]


class TestFilter:
    """Query and category filtering."""

    def test_query_matches_title(self, catalog):
        result = filter_videos(catalog, "safety")
        assert "Fire Safety" in _titles(result)
        assert "Onboarding" not in _titles(result)

    def test_query_is_case_insensitive_and_trimmed(self, catalog):
        assert _titles(filter_videos(catalog, "  ONBOARD ")) == ["Onboarding"]

    def test_query_matches_description(self, catalog):
        assert _titles(filter_videos(catalog, "evacuation")) == ["Fire Safety"]

    def test_query_matches_category(self, catalog):
        # "safety" also hits Lifting Technique through its category
        assert _titles(filter_videos(catalog, "safety")) == ["Fire Safety", "Lifting Technique"]

    def test_empty_query_keeps_everything_in_order(self, catalog):
        assert filter_videos(catalog, "") == catalog

    def test_category_excludes_text_matches(self, catalog):
        assert filter_videos(catalog, "first week", category="Safety") == []
        assert _titles(filter_videos(catalog, "first week", category="HR")) == ["Onboarding"]

    def test_category_only(self, catalog):
        assert _titles(filter_videos(catalog, category="Safety")) == ["Fire Safety", "Lifting Technique"]

    def test_two_titles(self, loaded_at):
        from staffacademy.fetcher import normalize_catalog
        videos = normalize_catalog(
            [{"title": "Fire Safety", "url": "a"}, {"title": "Onboarding", "url": "b"}],
            loaded_at,
        )
        assert _titles(filter_videos(videos, "safety")) == ["Fire Safety"]


def test_categories_in_first_appearance_order(catalog):
    assert list_categories(catalog) == ["General", "HR", "Safety"]


def test_continue_watching_sorted_and_joined(catalog):
    progress = {
        "fire-101": {"playedSeconds": 30, "duration": 60, "lastSeen": 100},
        "onboard-1": {"playedSeconds": 10, "duration": 100, "lastSeen": 300},
        "deleted-video": {"playedSeconds": 5, "duration": 10, "lastSeen": 999},
    }
    entries = continue_watching(progress, catalog)
    assert [e.video.id for e in entries] == ["onboard-1", "fire-101"]
    assert entries[1].percent == 50


def test_continue_watching_missing_last_seen_sorts_last(catalog):
    progress = {
        "fire-101": {"playedSeconds": 1},
        "lift-2": {"playedSeconds": 1, "lastSeen": 5},
    }
    assert [e.video.id for e in continue_watching(progress, catalog)] == ["lift-2", "fire-101"]


def test_continue_watching_empty():
    assert continue_watching({}, []) == []


def test_related_same_category_excluding_selected(catalog):
    fire = next(v for v in catalog if v.id == "fire-101")
    assert [v.id for v in related_videos(catalog, fire)] == ["lift-2"]
    assert related_videos(catalog, None) == []


def test_related_limit(loaded_at):
    from staffacademy.fetcher import normalize_catalog
    videos = normalize_catalog([{"id": str(i), "url": f"u{i}"} for i in range(10)], loaded_at)
    assert len(related_videos(videos, videos[0])) == 6
