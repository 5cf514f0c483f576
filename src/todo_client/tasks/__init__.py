"""
Task subsystem.

Components:
- task_models.py: data structures (TaskItem, Priority, TaskDraft, TaskPatch)
- task_sync.py: server-authoritative sync engine (mutate, then refresh)
"""
