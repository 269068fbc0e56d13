"""Integration tests for Notion → vault sync.

These tests run complete syncs against an in-memory Notion workspace and a
real vault directory, checking the files left on disk.

    pytest tests/integration -m integration
"""
