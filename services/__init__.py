# services/__init__.py
"""services package initializer: one subpackage per entity kind plus the HTTP gateway; no runtime side effects."""

__all__ = ["events", "stories", "mentors", "posts", "internships", "users", "gateway"]
