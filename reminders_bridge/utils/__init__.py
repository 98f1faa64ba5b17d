"""Utility helpers for reminders-bridge."""
