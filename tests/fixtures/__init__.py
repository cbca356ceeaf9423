"""Test fixtures and sample data builders.

Fixture modules (database, catalog, api) are registered via pytest_plugins in
conftest.py. Plain builders can be imported directly:

    >>> from tests.fixtures.catalog import make_product, make_student
"""
