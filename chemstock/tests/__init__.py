"""
Tests Package

Test suite for the ChemStock authorization service.

Modules:
- test_predicates: Vocabulary, pure predicates and action policy
- test_resolver: Role/permission resolution against a fake store
- test_context: Session context state machine and stale-result handling
- test_clients: Store and identity HTTP clients (httpx.MockTransport)
- test_api: FastAPI endpoints

Run all tests:
    pytest chemstock/tests/
"""
