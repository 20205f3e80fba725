import pytest

from dailyledger.core.config import Config
from dailyledger.ledger import PaymentLedger
from dailyledger.storage.memory import InMemoryStorage

from factories import DAY


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
async def ledger(storage, config):
    """A started ledger filtered on DAY."""
    ledger = PaymentLedger(storage, config)
    await ledger.start()
    ledger.filter_date = DAY
    yield ledger
    await ledger.stop()
