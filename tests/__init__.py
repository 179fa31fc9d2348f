"""
Unit Tests for MinimaxChess

This package contains unit tests for all engine components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_rules.py

    # Run specific test
    pytest tests/test_search.py::TestFindBestMove::test_mate_in_one

Dependencies:
    - pytest: Test framework
    - python-chess: Reference move generator for cross-checks
"""
