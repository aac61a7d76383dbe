"""Integration adapters for external systems (the spreadsheet row store).

Keep these modules small and testable:
- No FastAPI request/response objects
- No session/role concerns
- Pure IO + parsing helpers
"""
