import pytest

from memory import MemoryBroker


@pytest.fixture
def broker():
    return MemoryBroker()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
