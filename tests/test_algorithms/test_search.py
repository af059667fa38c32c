"""
Tests for search algorithms.
"""

import math

import pytest

from nexus_algorithms.algorithms.search import (
    PrefixIndex,
    SearchCriteria,
    YearRange,
    boyer_moore_search,
    criteria_score,
    fuzzy_search,
    levenshtein_distance,
    relevance_search,
    similarity,
    tfidf_scores,
    weighted_search,
)
from nexus_algorithms.records import Field


def ids(items):
    return [getattr(item, "record", item).id for item in items]


# ------------------------------------------------------------------
# Levenshtein / fuzzy search
# ------------------------------------------------------------------


def test_levenshtein_distance_known_values():
    """Test classic edit-distance examples."""
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("abc", "") == 3
    assert levenshtein_distance("flaw", "flaw") == 0


def test_levenshtein_distance_symmetric():
    """Test distance does not depend on argument order."""
    assert levenshtein_distance("saturday", "sunday") == levenshtein_distance("sunday", "saturday")


def test_similarity_bounds():
    """Test similarity is 1 for equal strings and 0 for fully different ones."""
    assert similarity("abc", "abc") == 1.0
    assert similarity("abc", "xyz") == 0.0
    assert similarity("", "") == 1.0


def test_fuzzy_search_exact_match_ranks_first(students):
    """Test an exact match scores 1.0 and is ranked first."""
    query = "Alice Johnson alice.johnson@example.edu R0001"
    hits = fuzzy_search(students, query, threshold=0.3)
    assert hits[0].record.id == "1"
    assert hits[0].score == pytest.approx(1.0)
    assert all(a.score >= b.score for a, b in zip(hits, hits[1:]))


def test_fuzzy_search_is_case_insensitive(students):
    """Test query and record text are lower-cased."""
    hits = fuzzy_search(students, "ALICE", threshold=1.0, fields=[Field.FIRST_NAME])
    assert ids(hits) == ["1"]


def test_fuzzy_search_threshold(students):
    """Test records below the threshold are dropped."""
    # "alice" vs "alicia": distance 2 over length 6
    strict = fuzzy_search(students, "alice", threshold=0.7, fields=[Field.FIRST_NAME])
    loose = fuzzy_search(students, "alice", threshold=0.6, fields=[Field.FIRST_NAME])
    assert ids(strict) == ["1"]
    assert ids(loose) == ["1", "5"]
    assert loose[1].score == pytest.approx(1 - 2 / 6)


def test_fuzzy_search_ties_keep_input_order(student_factory):
    """Test equal scores preserve input order."""
    records = [
        student_factory("a", "Sam", "Lee"),
        student_factory("b", "Sam", "Lee"),
        student_factory("c", "Sam", "Lee"),
    ]
    hits = fuzzy_search(records, "sam", threshold=0.0, fields=[Field.FIRST_NAME])
    assert ids(hits) == ["a", "b", "c"]


def test_fuzzy_search_empty_inputs(students):
    """Test empty query or corpus returns no hits."""
    assert fuzzy_search(students, "") == []
    assert fuzzy_search([], "alice") == []


def test_fuzzy_search_uses_config_threshold(students, monkeypatch):
    """Test the configured threshold is used when none is passed."""
    from nexus_algorithms.config import config

    monkeypatch.setattr(config.search, "fuzzy_threshold", 1.0)
    hits = fuzzy_search(students, "alicia", fields=[Field.FIRST_NAME])
    assert ids(hits) == ["5"]


# ------------------------------------------------------------------
# Boyer-Moore
# ------------------------------------------------------------------


def test_boyer_moore_finds_all_occurrences():
    """Test every occurrence is reported in order."""
    assert boyer_moore_search("abracadabra", "abra") == [0, 7]
    assert boyer_moore_search("hello world", "world") == [6]


def test_boyer_moore_overlapping_matches():
    """Test overlapping occurrences are all found."""
    assert boyer_moore_search("aaaa", "aa") == [0, 1, 2]
    assert boyer_moore_search("abababa", "aba") == [0, 2, 4]


def test_boyer_moore_edge_cases():
    """Test no match, empty pattern and pattern longer than text."""
    assert boyer_moore_search("abcdef", "xyz") == []
    assert boyer_moore_search("abc", "") == []
    assert boyer_moore_search("ab", "abc") == []
    assert boyer_moore_search("abc", "abc") == [0]


# ------------------------------------------------------------------
# Prefix index
# ------------------------------------------------------------------


def test_prefix_index_lookup(students):
    """Test lookups return ids of every record under the prefix."""
    index = PrefixIndex.from_records(students)
    assert index.lookup("ali") == frozenset({"1", "5"})
    assert index.lookup("Smith") == frozenset({"2", "6"})
    assert index.lookup("smithe") == frozenset({"6"})


def test_prefix_index_missing_prefix(students):
    """Test a broken path yields an empty set."""
    index = PrefixIndex.from_records(students)
    assert index.lookup("xyz") == frozenset()


def test_prefix_index_contains_and_len(students):
    """Test membership of complete values and entry count."""
    index = PrefixIndex.from_records(students)
    assert "alice" in index
    assert "ali" not in index
    assert len(index) == 2 * len(students)


def test_prefix_index_lookup_does_not_mutate(students):
    """Test repeated lookups are stable and the result is immutable."""
    index = PrefixIndex()
    index.insert("Data", "x")
    first = index.lookup("da")
    assert isinstance(first, frozenset)
    assert index.lookup("da") == first == frozenset({"x"})


# ------------------------------------------------------------------
# TF-IDF relevance
# ------------------------------------------------------------------


def test_tfidf_scores_basic():
    """Test tf * idf with substring document frequency."""
    docs = ["red apple", "green apple pie", "blue sky"]
    scores = tfidf_scores(docs, "apple")
    assert scores[0] == pytest.approx(0.5 * math.log(3 / 2))
    assert scores[1] == pytest.approx((1 / 3) * math.log(3 / 2))
    assert scores[2] == 0.0


def test_relevance_search_ranks_positive_scores(students):
    """Test only records scoring above zero are returned."""
    hits = relevance_search(students, "mathematics")
    assert ids(hits) == ["2", "5"]
    assert hits[0].score == pytest.approx(0.2 * math.log(3))


def test_relevance_search_ubiquitous_term_scores_nothing(student_factory):
    """Test a term contained in every document has zero idf."""
    records = [student_factory(str(i), "Pat", f"Doe{i}") for i in range(3)]
    assert relevance_search(records, "pat") == []


def test_relevance_search_blank_query(students):
    """Test a blank query returns nothing."""
    assert relevance_search(students, "   ") == []


# ------------------------------------------------------------------
# Weighted search
# ------------------------------------------------------------------


def test_weighted_search_single_criterion(students):
    """Test department substring matching, case-insensitive."""
    result = weighted_search(students, SearchCriteria(department="MATH"))
    assert ids(result) == ["2", "5"]


def test_weighted_search_all_criteria_required(students):
    """Test threshold 1.0 requires every enabled criterion to match."""
    criteria = SearchCriteria(department="math", year_range=YearRange(2, 3), threshold=1.0)
    assert ids(weighted_search(students, criteria)) == ["5"]


def test_weighted_search_custom_weights(students):
    """Test weights shift which records pass."""
    criteria = SearchCriteria(
        department="math",
        year_range=YearRange(2, 3),
        weights={"department": 3, "year": 1},
        threshold=0.75,
    )
    assert ids(weighted_search(students, criteria)) == ["2", "5"]


def test_weighted_search_zero_total_weight(students):
    """Test nothing passes when the enabled weight sums to zero."""
    criteria = SearchCriteria(department="math", weights={"department": 0})
    assert weighted_search(students, criteria) == []
    assert weighted_search(students, SearchCriteria()) == []


def test_weighted_search_name_criterion(student_factory):
    """Test the name criterion fuzzy-matches the searchable text."""
    records = [
        student_factory("1", "Alice", "Johnson"),
        student_factory("2", "Zed", "Qwerty"),
    ]
    criteria = SearchCriteria(name="alice johnson alice.johnson@example.edu", threshold=1.0)
    assert ids(weighted_search(records, criteria)) == ["1"]


def test_criteria_score(students):
    """Test matched and total weight are reported separately."""
    criteria = SearchCriteria(course="b.sc", year_range=YearRange(1, 1))
    assert criteria_score(students[1], criteria) == (2.0, 2.0)
    assert criteria_score(students[0], criteria) == (0.0, 2.0)
