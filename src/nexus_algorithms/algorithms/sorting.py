"""
Sorting algorithms with pluggable comparators.

Every routine returns a new list and leaves its input untouched.
Comparators follow the ``compare(a, b) -> int`` convention (negative when
``a`` sorts first, zero when equal, positive otherwise).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from numbers import Integral, Real
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple, TypeVar

from pyuca import Collator

from ..config import config
from ..records import Course, Field, FieldValue, Student, to_timestamp
from ..utils.logging_config import get_logger
from .exceptions import CycleError

logger = get_logger(__name__)

T = TypeVar("T")
Comparator = Callable[[T, T], float]
Direction = Literal["asc", "desc"]

DEFAULT_RUN_SIZE = 32


@dataclass(frozen=True)
class SortKey:
    """One level of a multi-key sort."""

    field: Field
    direction: Direction = "asc"

    def __post_init__(self):
        if self.direction not in ("asc", "desc"):
            raise ValueError(
                f"direction must be 'asc' or 'desc', got {self.direction!r}"
            )


def natural_compare(a, b) -> int:
    """Comparator using ``<`` on the values themselves."""
    return (a > b) - (a < b)


# ------------------------------------------------------------------
# Insertion sort / hybrid quicksort
# ------------------------------------------------------------------

def insertion_sort(
    arr: List[T], low: int, high: int, compare: Comparator
) -> None:
    """Sort ``arr[low..high]`` (inclusive) in place."""
    for i in range(low + 1, high + 1):
        key = arr[i]
        j = i - 1
        while j >= low and compare(arr[j], key) > 0:
            arr[j + 1] = arr[j]
            j -= 1
        arr[j + 1] = key


def _partition(arr: List[T], low: int, high: int, compare: Comparator) -> int:
    """Lomuto partition around a median-of-three pivot."""
    mid = (low + high) // 2
    if compare(arr[mid], arr[low]) < 0:
        arr[low], arr[mid] = arr[mid], arr[low]
    if compare(arr[high], arr[low]) < 0:
        arr[low], arr[high] = arr[high], arr[low]
    if compare(arr[high], arr[mid]) < 0:
        arr[mid], arr[high] = arr[high], arr[mid]

    pivot = arr[mid]
    arr[mid], arr[high] = arr[high], arr[mid]

    i = low - 1
    for j in range(low, high):
        if compare(arr[j], pivot) <= 0:
            i += 1
            arr[i], arr[j] = arr[j], arr[i]
    arr[i + 1], arr[high] = arr[high], arr[i + 1]
    return i + 1


def hybrid_quicksort(
    items: Sequence[T],
    compare: Comparator = natural_compare,
    threshold: Optional[int] = None,
) -> List[T]:
    """
    Quicksort with median-of-three pivots and insertion sort for small segments.

    Segments shorter than *threshold* are finished by insertion sort. The
    pending segments live on an explicit stack and the larger half is
    deferred, so the stack holds O(log n) entries. Not stable. Average
    O(n log n); adversarial inputs can still degrade to O(n^2).

    Args:
        items: Items to sort
        compare: Three-way comparator
        threshold: Segment size below which insertion sort is used
            (default from config)

    Returns:
        New sorted list
    """
    if threshold is None:
        threshold = config.sorting.quicksort_threshold
    if threshold < 1:
        raise ValueError(f"threshold must be >= 1, got {threshold}")

    result = list(items)
    stack = [(0, len(result) - 1)]
    while stack:
        low, high = stack.pop()
        while low < high:
            if high - low + 1 < threshold:
                insertion_sort(result, low, high, compare)
                break
            p = _partition(result, low, high, compare)
            # Defer the larger side, keep iterating on the smaller one
            if p - low < high - p:
                stack.append((p + 1, high))
                high = p - 1
            else:
                stack.append((low, p - 1))
                low = p + 1
    return result


# ------------------------------------------------------------------
# Run-merge sort
# ------------------------------------------------------------------

def _merge(
    arr: List[T], left: int, mid: int, right: int, compare: Comparator
) -> None:
    left_part = arr[left:mid + 1]
    right_part = arr[mid + 1:right + 1]
    i = j = 0
    k = left
    while i < len(left_part) and j < len(right_part):
        # <= keeps the left element first on ties (stability)
        if compare(left_part[i], right_part[j]) <= 0:
            arr[k] = left_part[i]
            i += 1
        else:
            arr[k] = right_part[j]
            j += 1
        k += 1
    while i < len(left_part):
        arr[k] = left_part[i]
        i += 1
        k += 1
    while j < len(right_part):
        arr[k] = right_part[j]
        j += 1
        k += 1


def run_merge_sort(
    items: Sequence[T],
    compare: Comparator = natural_compare,
    run_size: int = DEFAULT_RUN_SIZE,
) -> List[T]:
    """
    Stable bottom-up merge sort over insertion-sorted runs.

    The input is cut into runs of *run_size*, each run is insertion sorted,
    then adjacent runs are merged with a doubling span. O(n log n) worst
    case, and close to linear when the input already contains long sorted
    runs.
    """
    if run_size < 1:
        raise ValueError(f"run_size must be >= 1, got {run_size}")

    result = list(items)
    n = len(result)
    for start in range(0, n, run_size):
        insertion_sort(result, start, min(start + run_size - 1, n - 1), compare)

    size = run_size
    while size < n:
        for start in range(0, n, size * 2):
            mid = start + size - 1
            end = min(start + size * 2 - 1, n - 1)
            if mid < end:
                _merge(result, start, mid, end, compare)
        size *= 2
    return result


# ------------------------------------------------------------------
# Radix / bucket sort
# ------------------------------------------------------------------

def _counting_sort_by_digit(values: List[int], exp: int) -> List[int]:
    count = [0] * 10
    for v in values:
        count[(v // exp) % 10] += 1
    for i in range(1, 10):
        count[i] += count[i - 1]
    output = [0] * len(values)
    # Walk backwards so equal digits keep their relative order
    for v in reversed(values):
        digit = (v // exp) % 10
        count[digit] -= 1
        output[count[digit]] = v
    return output


def radix_sort(values: Sequence[int]) -> List[int]:
    """
    LSD radix sort (base 10) for non-negative integers.

    Any integral type is accepted, numpy integers included; the result
    holds plain ints.

    Raises:
        ValueError: If any value is negative or not an integer
    """
    result: List[int] = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, Integral):
            raise ValueError(f"radix_sort only accepts integers, got {v!r}")
        if v < 0:
            raise ValueError(f"radix_sort only accepts non-negative integers, got {v}")
        result.append(int(v))
    if len(result) <= 1:
        return result

    max_value = max(result)
    exp = 1
    while max_value // exp > 0:
        result = _counting_sort_by_digit(result, exp)
        exp *= 10
    return result


def bucket_sort(
    values: Sequence[float], bucket_count: Optional[int] = None
) -> List[float]:
    """
    Bucket sort over equal-width ranges between the observed min and max.

    Near linear for roughly uniform data; skewed data degrades to the cost
    of sorting the crowded buckets.
    """
    if bucket_count is None:
        bucket_count = config.sorting.bucket_count
    if bucket_count < 1:
        raise ValueError(f"bucket_count must be >= 1, got {bucket_count}")

    result = list(values)
    if len(result) <= 1:
        return result

    lo, hi = min(result), max(result)
    if lo == hi:
        return result
    width = (hi - lo) / bucket_count

    buckets: List[List[float]] = [[] for _ in range(bucket_count)]
    for v in result:
        index = min(int((v - lo) / width), bucket_count - 1)
        buckets[index].append(v)

    ordered: List[float] = []
    for bucket in buckets:
        if bucket:
            ordered.extend(run_merge_sort(bucket))
    return ordered


# ------------------------------------------------------------------
# Multi-key record sort
# ------------------------------------------------------------------

@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loads the DUCET table once per process
    return Collator()


def collation_key(text: str) -> Tuple[int, ...]:
    """Unicode Collation Algorithm sort key (case and accents are secondary)."""
    return _collator().sort_key(text)


def compare_values(a: FieldValue, b: FieldValue) -> float:
    """
    Compare two field values of the same kind.

    Strings use Unicode collation independent of the process locale, so
    ``"alice" < "Bob" < "Émile" < "Zoe"``. Dates compare by instant and
    numbers by value. Missing values or mismatched kinds compare equal.
    """
    if isinstance(a, str) and isinstance(b, str):
        ka, kb = collation_key(a), collation_key(b)
        return (ka > kb) - (ka < kb)
    if isinstance(a, (date, datetime)) and isinstance(b, (date, datetime)):
        return to_timestamp(a) - to_timestamp(b)
    if (
        isinstance(a, Real) and isinstance(b, Real)
        and not isinstance(a, bool) and not isinstance(b, bool)
    ):
        return a - b
    return 0


def record_comparator(keys: Sequence[SortKey]) -> Comparator:
    """Build a comparator that applies *keys* in priority order."""
    def compare(a: Student, b: Student) -> float:
        for key in keys:
            comparison = compare_values(key.field.read(a), key.field.read(b))
            if comparison != 0:
                return -comparison if key.direction == "desc" else comparison
        return 0

    return compare


def multi_key_sort(
    records: Sequence[Student], keys: Sequence[SortKey]
) -> List[Student]:
    """
    Sort records lexicographically by *keys*.

    The first key with a non-zero comparison decides. Uses
    ``hybrid_quicksort``, so records equal on every key may be reordered.
    """
    if not keys:
        return list(records)
    return hybrid_quicksort(records, record_comparator(keys))


# ------------------------------------------------------------------
# Topological sort
# ------------------------------------------------------------------

def topological_sort(courses: Sequence[Course]) -> List[Course]:
    """
    Order courses so every prerequisite precedes the courses requiring it.

    Kahn's algorithm with a FIFO queue; ties follow input order.
    Prerequisite ids that do not name an input course are ignored.
    Edges point from a prerequisite to its dependents, so foundational
    courses come out first; reverse the result for dependents-first order.

    Raises:
        CycleError: If some courses can never be dequeued
        ValueError: If two courses share an id
    """
    by_id: Dict[str, Course] = {}
    for course in courses:
        if course.id in by_id:
            raise ValueError(f"Duplicate course id: {course.id}")
        by_id[course.id] = course

    dependents: Dict[str, List[str]] = {cid: [] for cid in by_id}
    in_degree: Dict[str, int] = {cid: 0 for cid in by_id}
    for course in courses:
        for prereq in course.prerequisites:
            if prereq not in by_id:
                logger.warning(
                    "Ignoring unknown prerequisite %r of course %r", prereq, course.id
                )
                continue
            dependents[prereq].append(course.id)
            in_degree[course.id] += 1

    queue = deque(cid for cid in by_id if in_degree[cid] == 0)
    ordered: List[Course] = []
    while queue:
        current = queue.popleft()
        ordered.append(by_id[current])
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(by_id):
        remaining = [cid for cid in by_id if in_degree[cid] > 0]
        raise CycleError(remaining)
    return ordered
