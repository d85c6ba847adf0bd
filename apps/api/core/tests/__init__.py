"""Tests for the API core modules."""
