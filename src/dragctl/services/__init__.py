"""Service layer — the drag state machine and CLI-facing operations.

Services may import from domain and plugins.
They must never import from commands or output.
"""
