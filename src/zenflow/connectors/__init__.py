"""
Connectors.

- console_connector.py: interactive REPL over the command registry
"""
