"""Pure domain logic: entities, access policy, task queries, restore workflow.

Nothing in this package touches FastAPI or the database directly.
"""
