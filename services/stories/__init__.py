# services/stories/__init__.py
"""stories service package: alumni success stories."""
