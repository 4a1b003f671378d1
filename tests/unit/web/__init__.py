"""Unit tests for OffsetPanel web modules.

Each route module has a corresponding test file.

Structure:
    tests/unit/web/
    ├── test_auth.py                  # Sessions, OTP input, token sync
    ├── test_dependencies.py          # Shared dependency providers
    ├── test_routes_auth.py           # Login / logout routes
    ├── test_routes_prices.py         # Price table pages and mutations
    └── test_routes_health_debug.py   # Health and auth debug routes

Testing pattern:
    - Use FastAPI's TestClient for route testing
    - Override service dependencies with mocks
    - Test auth requirements
    - Test error handling
"""
