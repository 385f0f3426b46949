"""Tests - Gate proof test suite."""
