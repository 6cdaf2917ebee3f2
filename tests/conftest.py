import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True, scope="session")
def quiet_key_logging():
    # Solo avisos; el rastro DEBUG de cada tecla no aporta en los tests
    logger.remove()
    sink_id = logger.add(sys.stderr, level="WARNING")
    yield
    logger.remove(sink_id)
