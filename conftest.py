import logging

import pytest
from faker import Faker

from tests.helpers import FakeSocketTransport, FakeTransport, NotificationHistory

logging.basicConfig(level=logging.DEBUG)


@pytest.fixture(scope="function", autouse=True)
def setup_faker():
    Faker.seed(0)


@pytest.fixture(scope="function")
def history() -> NotificationHistory:
    return NotificationHistory()


@pytest.fixture(scope="function")
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(scope="function")
def socket_transport() -> FakeSocketTransport:
    return FakeSocketTransport()
