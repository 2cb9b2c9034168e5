"""Bookmarks API: a personal bookmarking backend (bookmarks, categories, tags) built on FastAPI."""
