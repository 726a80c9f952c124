"""
Persistence adapters.

Each adapter implements the MemberStorage port (load/save of the whole
collection). Today the JSON key-value file is the default and SQL is opt-in
through DATABASE_URL; services never touch either directly.
"""
