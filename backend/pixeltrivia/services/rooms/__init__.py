"""Room engine services: codes, scoring, storage and the two controllers.

This package contains the game mechanics that HTTP routes and CLI commands
call into, keeping transport concerns separated from room state rules.
"""
