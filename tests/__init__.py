# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Sayso API:
# - test_routing_table.py / test_classifier.py: route classes and access decisions
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_service.py: Service tests with the Supabase wrapper patched out
# - test_auth.py: JWT verification
# - test_middleware.py / test_api.py: end-to-end through the FastAPI app
#
# Run tests with: poetry run pytest
# =============================================================================
