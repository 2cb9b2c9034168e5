"""
API route modules.

This package contains subrouters for:
- Actions: form actions posted by the UI (bookmarks, categories, theme)
- Auth: register, login, logout and current user; admin login
- Categories, Bookmarks, Tags, Files: owner-scoped read endpoints

Routers are included from bookmarks_api.api.main (under the /api/v1 prefix).
"""
