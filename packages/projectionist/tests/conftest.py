from __future__ import annotations

from collections.abc import Iterator

import pytest
from bank_account import ACCOUNTS, AccountStore

from cqrs_ddd_projectionist import InMemoryHandlerQueue, Projectionist


@pytest.fixture(autouse=True)
def accounts() -> Iterator[AccountStore]:
    ACCOUNTS.clear()
    yield ACCOUNTS
    ACCOUNTS.clear()


@pytest.fixture
def queue() -> InMemoryHandlerQueue:
    return InMemoryHandlerQueue()


@pytest.fixture
def projectionist(queue: InMemoryHandlerQueue) -> Projectionist:
    return Projectionist(queue=queue)
