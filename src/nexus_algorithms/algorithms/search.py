"""
Search algorithms over student records.

Provides edit-distance fuzzy matching, Boyer-Moore exact pattern search,
a caller-owned prefix index (trie), TF-IDF relevance ranking and
weighted multi-criteria filtering.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from ..config import config
from ..records import Field, Student, field_text
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FUZZY_FIELDS: Tuple[Field, ...] = (
    Field.FIRST_NAME,
    Field.LAST_NAME,
    Field.EMAIL,
    Field.ROLL_NO,
)
DEFAULT_RELEVANCE_FIELDS: Tuple[Field, ...] = (
    Field.FIRST_NAME,
    Field.LAST_NAME,
    Field.EMAIL,
    Field.COURSE,
    Field.DEPARTMENT,
)
NAME_MATCH_THRESHOLD = 0.6


@dataclass(frozen=True)
class SearchHit:
    """A matched record and its score."""

    record: Student
    score: float


@dataclass(frozen=True)
class YearRange:
    """Inclusive academic-year range."""

    min: int
    max: int


@dataclass(frozen=True)
class SearchCriteria:
    """
    Criteria for ``weighted_search``.

    Each criterion left as ``None`` is disabled. ``weights`` maps a criterion
    name (``"name"``, ``"department"``, ``"course"``, ``"year"``) to its
    weight; missing entries weigh 1. ``threshold`` is the fraction of the
    enabled weight that must match (``None`` uses the configured default).
    """

    name: Optional[str] = None
    department: Optional[str] = None
    course: Optional[str] = None
    year_range: Optional[YearRange] = None
    threshold: Optional[float] = None
    weights: Dict[str, float] = field(default_factory=dict)

    def weight(self, criterion: str) -> float:
        value = self.weights.get(criterion)
        return 1.0 if value is None else float(value)


# ------------------------------------------------------------------
# Edit distance / fuzzy search
# ------------------------------------------------------------------

def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Calculate the Levenshtein (edit) distance between two strings.

    Fills the full ``(len(s2)+1) x (len(s1)+1)`` dynamic-programming matrix
    with unit insert, delete and substitute costs.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    rows = len(s2) + 1
    cols = len(s1) + 1
    matrix = [[0] * cols for _ in range(rows)]
    for i in range(cols):
        matrix[0][i] = i
    for j in range(rows):
        matrix[j][0] = j

    for j in range(1, rows):
        for i in range(1, cols):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            matrix[j][i] = min(
                matrix[j][i - 1] + 1,  # insertion
                matrix[j - 1][i] + 1,  # deletion
                matrix[j - 1][i - 1] + cost,  # substitution
            )
    return matrix[rows - 1][cols - 1]


def similarity(query: str, text: str) -> float:
    """Normalized similarity ``1 - distance / max(len)`` in [0, 1]."""
    longest = max(len(query), len(text))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(query, text) / longest


def fuzzy_search(
    records: Sequence[Student],
    query: str,
    threshold: Optional[float] = None,
    fields: Sequence[Field] = DEFAULT_FUZZY_FIELDS,
) -> List[SearchHit]:
    """
    Rank records by edit-distance similarity to *query*.

    The query and each record's searchable text (space-joined *fields*) are
    lower-cased before comparison.

    Args:
        records: Records to search
        query: Free-text query
        threshold: Minimum similarity to keep a record (default from config)
        fields: Fields concatenated into the searchable text

    Returns:
        Hits with similarity >= threshold, best first; equal scores keep
        their input order. Empty query or corpus returns an empty list.
    """
    if threshold is None:
        threshold = config.search.fuzzy_threshold
    if not query or not records:
        return []

    query_lower = query.lower()
    hits = []
    for record in records:
        score = similarity(query_lower, field_text(record, fields).lower())
        if score >= threshold:
            hits.append(SearchHit(record, score))

    # sorted() is stable, so ties keep input order
    return sorted(hits, key=lambda h: h.score, reverse=True)


# ------------------------------------------------------------------
# Boyer-Moore
# ------------------------------------------------------------------

def build_bad_char_table(pattern: str) -> Dict[str, int]:
    """Rightmost index of every character in *pattern*."""
    return {ch: i for i, ch in enumerate(pattern)}


def boyer_moore_search(text: str, pattern: str) -> List[int]:
    """
    Find every starting offset of *pattern* in *text*.

    Uses the bad-character rule only. On a mismatch at pattern index ``j``
    the window moves by ``max(1, j - last[c])``; after a full match it moves
    by ``m - last[next char]`` (or 1 at the end of the text), so overlapping
    occurrences are reported.

    Examples:
        >>> boyer_moore_search("abracadabra", "abra")
        [0, 7]
        >>> boyer_moore_search("aaaa", "aa")
        [0, 1, 2]
    """
    n, m = len(text), len(pattern)
    if m == 0 or m > n:
        return []

    last = build_bad_char_table(pattern)
    positions: List[int] = []
    shift = 0
    while shift <= n - m:
        j = m - 1
        while j >= 0 and pattern[j] == text[shift + j]:
            j -= 1

        if j < 0:
            positions.append(shift)
            if shift + m < n:
                shift += m - last.get(text[shift + m], -1)
            else:
                shift += 1
        else:
            shift += max(1, j - last.get(text[shift + j], -1))
    return positions


# ------------------------------------------------------------------
# Prefix index
# ------------------------------------------------------------------

class _TrieNode:
    __slots__ = ("children", "record_ids", "is_end")

    def __init__(self):
        self.children: Dict[str, _TrieNode] = {}
        self.record_ids: Set[str] = set()
        self.is_end = False


class PrefixIndex:
    """
    Trie keyed by character for prefix lookups.

    Each node carries the ids of the records whose indexed text passes
    through it, so a lookup is a walk down the prefix path. The index is
    built once by the caller and queried repeatedly; lookups return
    frozensets and never modify the trie.

    Usage:
        index = PrefixIndex.from_records(students, [Field.FIRST_NAME])
        ids = index.lookup("al")
    """

    def __init__(self):
        self._root = _TrieNode()
        self._size = 0

    @classmethod
    def from_records(
        cls,
        records: Iterable[Student],
        fields: Sequence[Field] = (Field.FIRST_NAME, Field.LAST_NAME),
    ) -> "PrefixIndex":
        """Index each of *fields* of every record under the record id."""
        index = cls()
        for record in records:
            for f in fields:
                value = f.read(record)
                if value:
                    index.insert(str(value), record.id)
        logger.debug("Built prefix index with %d entries", len(index))
        return index

    def insert(self, text: str, record_id: str) -> None:
        """Add *record_id* under every prefix of ``text.lower()``."""
        node = self._root
        node.record_ids.add(record_id)
        for ch in text.lower():
            node = node.children.setdefault(ch, _TrieNode())
            node.record_ids.add(record_id)
        node.is_end = True
        self._size += 1

    def lookup(self, prefix: str) -> FrozenSet[str]:
        """Ids of records with an indexed value starting with *prefix*."""
        node = self._root
        for ch in prefix.lower():
            node = node.children.get(ch)
            if node is None:
                return frozenset()
        return frozenset(node.record_ids)

    def __contains__(self, text: str) -> bool:
        node = self._root
        for ch in text.lower():
            node = node.children.get(ch)
            if node is None:
                return False
        return node.is_end

    def __len__(self) -> int:
        return self._size


# ------------------------------------------------------------------
# TF-IDF relevance
# ------------------------------------------------------------------

def tfidf_scores(documents: Sequence[str], query: str) -> List[float]:
    """
    TF-IDF score of *query* against each document.

    ``tf`` is term count over document length in tokens; ``idf`` is
    ``ln(N / max(1, documents containing the term))`` where containment is
    a substring test on the lower-cased document.
    """
    query_terms = query.lower().split()
    if not query_terms or not documents:
        return [0.0] * len(documents)

    lowered = [doc.lower() for doc in documents]
    doc_count = len(lowered)
    idf = {}
    for term in set(query_terms):
        containing = sum(1 for doc in lowered if term in doc)
        idf[term] = math.log(doc_count / max(1, containing))

    scores = []
    for doc in lowered:
        tokens = doc.split()
        if not tokens:
            scores.append(0.0)
            continue
        counts = Counter(tokens)
        score = 0.0
        for term in query_terms:
            score += (counts[term] / len(tokens)) * idf[term]
        scores.append(score)
    return scores


def relevance_search(
    records: Sequence[Student],
    query: str,
    fields: Sequence[Field] = DEFAULT_RELEVANCE_FIELDS,
) -> List[SearchHit]:
    """Rank records by TF-IDF score, keeping only positive scores."""
    if not query.strip() or not records:
        return []
    documents = [field_text(r, fields) for r in records]
    scores = tfidf_scores(documents, query)
    hits = [SearchHit(r, s) for r, s in zip(records, scores) if s > 0]
    return sorted(hits, key=lambda h: h.score, reverse=True)


# ------------------------------------------------------------------
# Weighted multi-criteria search
# ------------------------------------------------------------------

def criteria_score(record: Student, criteria: SearchCriteria) -> Tuple[float, float]:
    """Return ``(matched_weight, total_weight)`` of *record* for *criteria*."""
    score = 0.0
    total = 0.0

    if criteria.name:
        w = criteria.weight("name")
        if fuzzy_search([record], criteria.name, NAME_MATCH_THRESHOLD):
            score += w
        total += w

    if criteria.department:
        w = criteria.weight("department")
        if criteria.department.lower() in record.department.lower():
            score += w
        total += w

    if criteria.course:
        w = criteria.weight("course")
        if criteria.course.lower() in record.course.lower():
            score += w
        total += w

    if criteria.year_range is not None:
        w = criteria.weight("year")
        if criteria.year_range.min <= record.year <= criteria.year_range.max:
            score += w
        total += w

    return score, total


def weighted_search(
    records: Sequence[Student], criteria: SearchCriteria
) -> List[Student]:
    """
    Filter records by weighted criteria.

    A record passes when its matched weight divided by the total enabled
    weight reaches the threshold. With no enabled weight nothing passes.
    Input order is preserved.
    """
    threshold = criteria.threshold
    if threshold is None:
        threshold = config.search.weighted_threshold

    results = []
    for record in records:
        score, total = criteria_score(record, criteria)
        if total > 0 and score / total >= threshold:
            results.append(record)
    return results
