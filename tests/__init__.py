"""
Test suite for Nexus Algorithms.

This package contains all tests organized by component:
- test_algorithms/: Tests for the search, sort, analytics and prediction engines
- test_utils/: Tests for logging helpers
"""
