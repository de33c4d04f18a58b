# services/posts/__init__.py
"""posts service package: community feed."""
