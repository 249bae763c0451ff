"""Domain layer — board models, projection, rules, and the state snapshot.

This layer depends only on stdlib and pydantic.
It must never import from services, plugins, commands, or config.
"""
