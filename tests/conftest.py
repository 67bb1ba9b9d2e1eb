from typing import Any

import pytest

from smartdict import SmartDict


class SizedSmartDict(SmartDict):
    """SmartDict with extra members that attributes may shadow."""

    __slots__ = ()

    @property
    def size(self) -> int:
        return len(self)

    @property
    def count(self) -> int:
        return len(self)

    @property
    def something(self) -> str:
        return 'something'

    @something.setter
    def something(self, value: Any) -> None:
        raise AssertionError('attribute assignment must not reach the property setter')


@pytest.fixture
def sized() -> type[SizedSmartDict]:
    """The ``SmartDict`` subclass with ``size``, ``count`` and ``something`` members."""
    return SizedSmartDict


@pytest.fixture
def record() -> SmartDict:
    return SmartDict()
