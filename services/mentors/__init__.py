# services/mentors/__init__.py
"""mentors service package: mentor applications and student-to-mentor messages."""
