"""Tests - Test suite and test infrastructure."""

# Scenario drivers and signing helpers live in tests.utils;
# tests themselves are run via pytest
