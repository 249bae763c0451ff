"""dragctl — multi-item drag-and-drop state machine and validation engine."""

__version__ = "0.1.0"
