"""
Nexus Algorithms - Core Package

Computational routines behind a student-management system.

This package provides:
- Search engine (fuzzy, Boyer-Moore, prefix index, TF-IDF, weighted criteria)
- Sort engine (hybrid quicksort, run merge sort, radix/bucket, multi-key, topological)
- Analytics engine (statistics, clustering, correlation, trends)
- Prediction engine (ridge regression, decision tree, neural network, ensemble)
"""

__version__ = "0.1.0"

from .records import Course, Feature, Field, Student

# Explicitly import subpackages so nexus_algorithms.algorithms etc. resolve on attribute access
from . import algorithms
from . import utils

__all__ = [
    "Course",
    "Feature",
    "Field",
    "Student",
    "algorithms",
    "utils",
]
