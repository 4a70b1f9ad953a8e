"""Test package for stoproute.

This package contains:
- Unit tests (test_routing.py, test_cache.py, test_provider.py, test_orchestrator.py)
- Configuration and link tests (test_config.py, test_links.py)
- Integration tests (test_integration.py)
- Test configuration and fakes (conftest.py)
"""
