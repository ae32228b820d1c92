"""
Single source of truth for database tables that exist after migrations (001).

Use these names when writing raw SQL. alembic/env.py asserts the registered models match.
"""
ALL_TABLE_NAMES = (
    "drops",
    "claims",
    "profiles",
    "user_roles",
)
