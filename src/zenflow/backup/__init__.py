"""
Backup subsystem.

- codec.py: versioned JSON export/import (merge semantics)
"""
