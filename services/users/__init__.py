# services/users/__init__.py
"""users service package: roles and profiles held by the identity provider."""
