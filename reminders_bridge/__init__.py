"""
reminders-bridge - asynchronous Apple Reminders access behind a method channel.
"""

__version__ = "0.1.0"
