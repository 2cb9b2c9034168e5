"""
Services orchestrate repositories for multi-step operations:
- auth: per-request session store, refresh, login and registration
- bookmarks: bookmark create/update with images and tags
- tags: tag reconciliation
- storage / images: fetched image bytes on local disk
"""
