"""
High-level use cases for the roster app.

member_service owns the collection and its write-through persistence,
photo_service turns uploads into data URLs and editor_service drives the
Creating/Editing form. Routers call these services instead of touching the
storage adapters directly.
"""
