"""
Stagehand Test Suite
====================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for stagehand.core (config, state, models, errors)
    ├── test_infrastructure/→ Tests for stagehand.infrastructure (cluster, kube, fetcher)
    ├── test_sync/          → Tests for stagehand.sync (cache, manifests, sync, registry)
    ├── test_products/      → Tests for stagehand.products (reconcilers, registry table)
    ├── test_orchestration/ → Tests for stagehand.orchestration (store, stage walk)
    ├── test_facade.py      → Tests for the Stagehand facade
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_sync/         # Run only sync tests
"""
