"""Async git history, authorship and co-change analytics."""
