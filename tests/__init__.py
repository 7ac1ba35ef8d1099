"""
Stagehand Test Suite
====================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → config, models, exceptions, variables
    ├── test_infrastructure/→ retry tracker, file system, encryption
    ├── test_integrations/  → service messages, process runner, bootstrap, engines
    ├── test_orchestration/ → convention processor and built-in conventions
    ├── test_integration/   → End-to-end runs against a real bash
    ├── test_facade.py      → DeploymentExecutor
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                                  # Run all tests
    pytest tests/test_core/                 # Run only core tests
    pytest tests/test_integration/          # Needs bash and openssl on PATH
"""
