"""
Service layer.

``event_validator`` holds the pure submission checks; the service
classes wrap SQLite access so API handlers never issue SQL directly.
"""
