"""
Command-line layer.

- bootstrap.py: composition root (settings -> store -> AppState)
- commands.py: slash-command registry
- main.py: entrypoint
"""
