"""Test fixtures for VNS.

This package provides reusable test fixtures:
- core: clock, scheduler, filesystem stores, shells and command contexts
- api: TestClient wired to a fresh shell
"""
