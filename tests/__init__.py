"""
GLD Client Test Suite

Directory Structure:
    unit/        - Pure unit tests for individual components (fast, no I/O)
    async/       - Async tests for the asyncio entry points
    integration/ - Full resolution flows across modules

Running Tests:
    # Run all tests
    pytest

    # Run specific test directory
    pytest tests/unit
    pytest tests/async
    pytest tests/integration

    # Run with coverage
    pytest --cov=gld_client --cov-report=html

Test Markers:
    @pytest.mark.unit         - Fast unit tests (no I/O)
    @pytest.mark.async_test   - Async tests
    @pytest.mark.integration  - Integration tests (cross-module)
    @pytest.mark.network      - Tests that mock the HTTP session

Fixtures:
    Shared fixtures are defined in conftest.py and include:
    - Component instances (ruleset_cache, game_state, decoder)
    - A mocked requests.Session and response builder
    - Blob builders that append trailers to a fixed-format payload
"""
