"""
ActionFlow - A minimal, async-first graph workflow engine.

Nodes run a prepare/execute/post cycle and return an action; a Flow follows
the edge labelled with that action until none matches.
"""

__version__ = "1.0.0"
