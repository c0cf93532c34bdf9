"""Taskell: a personal task tracker built around an explicit task state machine."""

__version__ = "0.1.0"
