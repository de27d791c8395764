"""
Core (no I/O).

Components:
- models.py: entity schema (Task, Project, Tag, TimeLog and their enums)
- ports.py: Protocols the reducers and helpers depend on
- query.py: view filter + multi-key sort for the task list
- notifications.py: overdue / due-soon classification
- stats.py: overview counters
- advice.py: offline productivity tips
- state.py: session state shared by the console commands
"""
