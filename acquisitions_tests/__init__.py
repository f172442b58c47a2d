"""
Tests for the acquisitions service.

Each test gets its own SQLite database under pytest's tmp_path, so tables
start empty.
"""
