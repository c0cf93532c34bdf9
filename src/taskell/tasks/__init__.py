"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStore, Result, TaskStatus)
- task_engine.py: pure state-transition functions
- task_queries.py: read-only projections and identifier resolution
- task_store.py: JSON file storage (load/save/transact, backup/import/export)
"""
