"""
Internship Matching Portal
Students apply to faculty-supervised projects; professors review them.

Architecture:
- MongoDB: users, projects, applications
- Skill matching: deterministic, case-insensitive exact match scoring
- Applications are authoritative; project applicant / intern sets follow them
"""

__version__ = "1.0.0"
