# services/internships/__init__.py
"""internships service package: admin-posted internship listings."""
