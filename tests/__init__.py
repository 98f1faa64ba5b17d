"""
Test suite for reminders-bridge.

This package contains:
- Unit tests for the models, stores, negotiator and facade
- Channel and stdio tests driving the facade through the wire format
- Mocked EventKit tests that work without PyObjC
"""
