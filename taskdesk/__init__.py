"""
TaskDesk backend: task tracking and user administration API.
"""
__version__ = "1.0.0"
