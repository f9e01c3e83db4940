"""Grouped release-notes generator for GitHub Actions."""
