# services/gateway/__init__.py
"""gateway package: HTTP surface composing every portal service router."""
