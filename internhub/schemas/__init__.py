"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Internal entity records
- Schemas: API contract (what client sends/receives) and match results
"""
