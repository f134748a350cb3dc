"""
Root conftest: keeps the Rich console quiet for the whole test session.
File logging stays on so failures can be traced in logs/.
"""

import pytest

from fuze.shared.system.logging import Logger


@pytest.fixture(autouse=True, scope="session")
def quiet_console():
    Logger.set_silent(True)
    yield
    Logger.set_silent(False)
