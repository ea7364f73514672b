"""
Task subsystem.

Components:
- task_models.py: data structures (Task, NewTask, TaskStatus, Employee)
- record_mapper.py: remote record <-> Task field mapping
- task_fetcher.py: one-page-at-a-time fetch with tagged results
- task_loader.py: pagination loop (cursor, busy flag, has_more)
- task_store.py: in-memory cache with remote-confirmed mutations
- task_persistence.py: JSON persistence of the cache between sessions
- task_api.py: small high-level helpers used by the console
"""
