from typing import Any, List, Mapping

import pytest

from beacon.config import SearchConfig, Settings
from beacon.records import Record
from beacon.search import engine as engine_mod
from beacon.search.engine import HybridSearcher, clamp_top_n
from beacon.search.filters import FieldFilter
from beacon.search.models import (
    DebugInfo,
    MultiSearchResponse,
    SearchFailure,
    SearchRequest,
    SearchResponse,
)

# ---------- Fixtures ----------


@pytest.fixture
def books() -> List[Record]:
    return [
        Record(text="The Go Programming Language", fields={"kind": "book"}, id="go"),
        Record(text="The Lord of the Rings", fields={"kind": "book"}, id="lotr"),
    ]


@pytest.fixture
def catalog() -> List[Record]:
    return [
        Record(text="Apple", fields={"kind": "fruit"}, id="1"),
        Record(text="Apple Pie", fields={"kind": "dessert"}, id="2"),
        Record(text="Pineapple", fields={"kind": "fruit"}, id="3"),
        Record(text="Applesauce", fields={"kind": "dessert"}, id="4"),
        Record(text="Grape", fields={"kind": "fruit"}, id="5"),
    ]


# ---------- Ranking ----------


def test_go_lang_finds_the_go_book(books: List[Record]) -> None:
    searcher = HybridSearcher(books, min_similarity=0.3)
    res = searcher.search("go lang", top_n=1)

    assert isinstance(res, SearchResponse)
    assert res.item is books[0]
    # Word match carries the score; n-gram and edit distance pull it down
    assert res.similarity == pytest.approx(0.4821, abs=1e-3)
    assert res.message == f"Found item with {res.similarity * 100:.2f}% similarity"
    assert res.debug is None


def test_go_lang_ranks_above_other_books(books: List[Record]) -> None:
    searcher = HybridSearcher(books, min_similarity=0.0)
    res = searcher.search("go lang", top_n=2)

    assert isinstance(res, MultiSearchResponse)
    assert [r.item for r in res.results] == books
    assert res.results[0].similarity > res.results[1].similarity


def test_self_match_scores_perfectly(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.3)
    for record in catalog:
        res = searcher.search(record.text)
        assert isinstance(res, SearchResponse)
        assert res.item is record
        assert res.similarity == 1.0


def test_long_self_match_dominates() -> None:
    items = [
        Record(text="International Business Machines"),
        Record(text="International Space Station"),
        Record(text="Business Intelligence"),
    ]
    searcher = HybridSearcher(items, min_similarity=0.0)
    res = searcher.search("International Business Machines", top_n=3)
    assert isinstance(res, MultiSearchResponse)
    assert res.results[0].item is items[0]
    assert res.results[0].similarity > res.results[1].similarity


def test_acronym_query_matches_capitalized_title(books: List[Record]) -> None:
    searcher = HybridSearcher(books, min_similarity=0.3)
    res = searcher.search("Lord Rings", debug=True)
    assert isinstance(res, SearchResponse)
    assert res.item is books[1]
    assert res.debug is not None
    assert res.debug.score_components is not None
    assert res.debug.score_components.acronym_match == 0.8


def test_ties_keep_dataset_order() -> None:
    items = [Record(text="alpha", id=str(i)) for i in range(4)]
    searcher = HybridSearcher(items, min_similarity=0.3)
    res = searcher.search("alpha", top_n=4)
    assert isinstance(res, MultiSearchResponse)
    assert [r.item.id for r in res.results] == ["0", "1", "2", "3"]
    assert [r.message for r in res.results] == [
        f"Rank {i} with 100.00% similarity" for i in range(1, 5)
    ]


# ---------- Failures ----------


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_empty_query_is_rejected_before_scoring(
    books: List[Record], query: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    def boom(*args, **kwargs):
        raise AssertionError("scorer must not run for empty queries")

    monkeypatch.setattr(engine_mod, "calculate_score", boom)
    res = HybridSearcher(books).search(query)
    assert isinstance(res, SearchFailure)
    assert res.error == "Query cannot be empty"
    assert res.to_wire() == {"error": "Query cannot be empty"}


def test_filter_excluding_everything_names_the_filter(books: List[Record]) -> None:
    res = HybridSearcher(books).search("go", FieldFilter("kind", "music"))
    assert isinstance(res, SearchFailure)
    assert res.error == "No items found matching filter: kind=music"


def test_empty_dataset_without_filter() -> None:
    res = HybridSearcher([]).search("go")
    assert isinstance(res, SearchFailure)
    assert res.error == "No items found matching the filter criteria"


def test_coarse_threshold_is_half_the_minimum(books: List[Record]) -> None:
    only_go = books[:1]
    # "go lang" scores ~0.482: below 0.9 but above 0.9 * 0.5
    res = HybridSearcher(only_go, min_similarity=0.9).search("go lang")
    assert isinstance(res, SearchResponse)
    assert res.similarity < 0.9

    res = HybridSearcher(only_go, min_similarity=1.0).search("go lang")
    assert isinstance(res, SearchFailure)
    assert res.error == "No matches found for 'go lang'"


def test_min_similarity_is_read_at_call_time(books: List[Record]) -> None:
    searcher = HybridSearcher(books[:1], min_similarity=0.3)
    assert searcher.get_min_similarity() == 0.3
    searcher.set_min_similarity(1.0)
    assert searcher.get_min_similarity() == 1.0
    assert isinstance(searcher.search("go lang"), SearchFailure)
    # Out-of-range values are accepted as-is
    searcher.set_min_similarity(-1.0)
    assert isinstance(searcher.search("go lang"), SearchResponse)


# ---------- Filters ----------


def test_filter_never_surfaces_excluded_items(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.0)
    flt = FieldFilter("kind", "fruit")
    res = searcher.search("apple", flt, top_n=10)

    assert isinstance(res, MultiSearchResponse)
    assert {r.item.id for r in res.results} == {"1", "3", "5"}
    assert res.total_found == 3
    assert res.filters == "kind=fruit"
    assert res.message == "Found 3 items with filter: kind=fruit matching 'apple'"


# ---------- top_n ----------


@pytest.mark.parametrize(
    "value,expected",
    [(None, 1), (0, 1), (-5, 1), (3, 3), (10, 10), (11, 10), (500, 10), ("4", 4), ("x", 1), (2.7, 2)],
)
def test_clamp_top_n(value: object, expected: int) -> None:
    assert clamp_top_n(value) == expected


def test_clamp_top_n_uses_default_for_garbage() -> None:
    assert clamp_top_n(object(), default=3) == 3
    assert clamp_top_n(float("nan"), default=2) == 2
    assert clamp_top_n(None, default=50) == 10


def test_top_n_is_capped_by_survivors(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.0)
    res = searcher.search("apple", top_n=50)
    assert isinstance(res, MultiSearchResponse)
    assert len(res.results) == len(catalog)
    assert res.query == "apple"
    assert res.total_found == len(catalog)
    assert res.filters is None
    assert res.message == "Found 5 items matching 'apple'"


def test_top_n_is_capped_at_ten() -> None:
    items = [Record(text=f"item {i}") for i in range(15)]
    res = HybridSearcher(items, min_similarity=0.0).search("item", top_n=12)
    assert isinstance(res, MultiSearchResponse)
    assert len(res.results) == 10


@pytest.mark.parametrize("top_n", [0, -3, 1, "bogus"])
def test_small_or_malformed_top_n_returns_single(catalog: List[Record], top_n: object) -> None:
    res = HybridSearcher(catalog).search("apple", top_n=top_n)  # type: ignore[arg-type]
    assert isinstance(res, SearchResponse)
    assert res.item is catalog[0]


def test_default_top_n_from_settings(catalog: List[Record]) -> None:
    settings = Settings(search=SearchConfig(min_similarity=0.0, default_top_n=3))
    searcher = HybridSearcher.from_settings(catalog, settings)
    res = searcher.search("apple")
    assert isinstance(res, MultiSearchResponse)
    assert len(res.results) == 3


# ---------- Debug ----------


def test_debug_per_call(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.0)
    res = searcher.search("  Apple  ", FieldFilter("kind", "fruit"), top_n=2, debug=True)
    assert isinstance(res, MultiSearchResponse)
    for r in res.results:
        assert isinstance(r.debug, DebugInfo)
        assert r.debug.query_normalized == "Apple"
        assert r.debug.filtered_candidates == 3
        assert r.debug.total_candidates == 5
        assert r.debug.score_components is not None
        assert r.debug.score_components.final_score == r.similarity


def test_debug_mode_on_engine(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog)
    assert searcher.search("apple").debug is None  # type: ignore[union-attr]
    searcher.set_debug_mode(True)
    res = searcher.search("apple")
    assert isinstance(res, SearchResponse)
    assert res.debug is not None


# ---------- Wire shape ----------


def test_single_response_wire_shape(catalog: List[Record]) -> None:
    res = HybridSearcher(catalog, debug_mode=True).search("apple")
    payload = res.to_wire()
    assert set(payload) == {"item", "similarity", "message", "debug"}
    assert payload["item"] == {"text": "Apple", "fields": {"kind": "fruit"}, "id": "1"}
    assert set(payload["debug"]) == {
        "queryNormalized",
        "scoreComponents",
        "filteredCandidates",
        "totalCandidates",
    }
    assert payload["debug"]["scoreComponents"]["finalScore"] == 1.0


def test_multi_response_wire_shape(catalog: List[Record]) -> None:
    res = HybridSearcher(catalog, min_similarity=0.0).search("apple", top_n=2)
    payload = res.to_wire()
    assert set(payload) == {"results", "query", "totalFound", "message"}
    assert len(payload["results"]) == 2
    assert payload["results"][0]["message"].startswith("Rank 1 with ")


class Product:
    """Caller-owned item that is neither a dataclass nor a pydantic model."""

    def __init__(self, name: str, category: str = "fruit") -> None:
        self.name = name
        self.category = category

    def get_search_text(self) -> str:
        return self.name

    def get_search_fields(self) -> Mapping[str, str]:
        return {"category": self.category}


def test_plain_item_serializes_through_searchable_view() -> None:
    items = [Product("Apple"), Product("Apple Pie", "dessert")]
    res = HybridSearcher(items, min_similarity=0.0).search("apple", top_n=2)
    assert isinstance(res, MultiSearchResponse)
    payload = res.to_wire()
    assert payload["results"][0]["item"] == {"text": "Apple", "fields": {"category": "fruit"}}
    assert payload["results"][1]["item"] == {
        "text": "Apple Pie",
        "fields": {"category": "dessert"},
    }

    single = HybridSearcher(items).search("apple")
    assert isinstance(single, SearchResponse)
    assert single.item is items[0]
    assert single.to_wire()["item"] == {"text": "Apple", "fields": {"category": "fruit"}}


# ---------- Dataset lifecycle ----------


def test_execute_request(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog)
    res = searcher.execute(SearchRequest(query="grape", top_n=1))
    assert isinstance(res, SearchResponse)
    assert res.item is catalog[4]


def test_rebuild_swaps_dataset(catalog: List[Record], books: List[Record]) -> None:
    searcher = HybridSearcher(catalog)
    assert searcher.item_count() == 5
    searcher.rebuild(books)
    assert searcher.item_count() == 2
    assert searcher.items == books
    res = searcher.search("The Lord of the Rings")
    assert isinstance(res, SearchResponse)
    assert res.item is books[1]


# ---------- Snapshot semantics ----------


class _MutatingFilter:
    """Changes searcher state from inside a running search."""

    def __init__(self, searcher: HybridSearcher, replacement: List[Record]) -> None:
        self._searcher = searcher
        self._replacement = replacement
        self.calls = 0

    def matches(self, item: Any) -> bool:
        if self.calls == 0:
            self._searcher.set_min_similarity(100.0)
            self._searcher.set_debug_mode(True)
            self._searcher.rebuild(self._replacement)
        self.calls += 1
        return True

    def description(self) -> str:
        return "mutating"


def test_search_uses_settings_captured_at_entry(catalog: List[Record]) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.3)
    flt = _MutatingFilter(searcher, [])

    res = searcher.search("apple", flt)

    assert isinstance(res, SearchResponse)
    assert res.item is catalog[0]
    assert res.debug is None
    assert flt.calls == len(catalog)
    # Changes apply to the next search
    assert searcher.item_count() == 0
    assert searcher.get_min_similarity() == 100.0
    assert isinstance(searcher.search("apple"), SearchFailure)


def test_rebuild_during_search_keeps_original_index(
    catalog: List[Record], books: List[Record]
) -> None:
    searcher = HybridSearcher(catalog, min_similarity=0.3)
    res = searcher.search("apple", _MutatingFilter(searcher, books), debug=True)

    assert isinstance(res, SearchResponse)
    assert res.item is catalog[0]
    assert res.debug is not None
    assert res.debug.total_candidates == len(catalog)
    assert res.debug.filtered_candidates == len(catalog)
    assert searcher.items == books
