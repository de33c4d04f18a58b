# services/events/__init__.py
"""events service package: admin-managed portal events."""
