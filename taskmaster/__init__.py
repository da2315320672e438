"""
Taskmaster

Personal task and notes manager with momento (start/finish) tracking and a
tool-calling assistant that works against the same service layer.
"""

__version__ = "0.1.0"
