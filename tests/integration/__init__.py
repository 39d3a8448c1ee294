"""
Integration tests for the rate-limit fallback service.

Test components together:
- End-to-end recovery scenarios (host events → dispatcher → recording client)
- API endpoints (FastAPI TestClient with dependency overrides)
"""
