"""Core configuration, types, events and exceptions."""
