"""
Task subsystem.

Components:
- service.py: create / edit / toggle / pin / delete helpers (stamp updated_at)
- sessions.py: tracked work sessions stored as time logs
"""
