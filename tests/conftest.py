"""Pytest fixtures shared by unit and scenario tests."""

import logging

import pytest

from tillcore import (
    CouponCatalog,
    InMemoryCustomerDirectory,
    InMemoryKeyValueStore,
    Sale,
    SaleConfig,
    configure_logging,
)

from .fixtures import CUSTOMERS, RecordingSink, TokenGate, fixed_clock


@pytest.fixture(scope="session", autouse=True)
def logging_setup():
    configure_logging(logging.DEBUG)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def catalog(store):
    return CouponCatalog(store)


@pytest.fixture
def customers():
    return InMemoryCustomerDirectory(CUSTOMERS)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def gate():
    return TokenGate()


@pytest.fixture
def config():
    return SaleConfig()


@pytest.fixture
def make_sale(catalog, config, customers, sink, gate):
    """Factory for sales wired with in-memory collaborators and a fixed clock."""

    def _make(**overrides):
        kwargs = dict(
            approval_gate=gate,
            customers=customers,
            sink=sink,
            clock=fixed_clock(),
        )
        kwargs.update(overrides)
        return Sale(catalog, config, **kwargs)

    return _make


@pytest.fixture
def sale(make_sale):
    return make_sale()
