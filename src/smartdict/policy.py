from logging import getLogger
from typing import Any, Iterable

from smartdict.errors import InvalidArgumentError
from smartdict.resolver import ATTR_REGEXP

_logger = getLogger(__name__)


def validate_attr_name(name: Any) -> str:
    """Check that ``name`` can be used as an attribute name.

    Parameters
    ----------
    name : Any
        The candidate name.

    Returns
    -------
    str
        ``name`` unchanged.

    Raises
    ------
    InvalidArgumentError
        If ``name`` is not a ``str`` or does not match the attribute grammar.
    """
    if not isinstance(name, str):
        raise InvalidArgumentError(f'str expected, {type(name).__name__} ({name!r}) given')
    if ATTR_REGEXP.fullmatch(name) is None:
        raise InvalidArgumentError(f'Incorrect attribute name {name!r}')
    return name


def add_attr_names(target: set[Any], names: Iterable[Any], *, operation: str) -> None:
    """Validate and add each of ``names`` to ``target``.

    Names are validated one at a time, so names preceding an invalid one
    remain in ``target`` when the error is raised.
    """
    names = tuple(names)
    if not names:
        raise InvalidArgumentError('No attrs specified')

    for name in names:
        target.add(validate_attr_name(name))
        _logger.debug('%s attribute %r', operation, name)


def discard_attr_names(target: set[Any], names: Iterable[Any], *, operation: str) -> None:
    """Remove each of ``names`` from ``target`` if present. Never validates."""
    names = tuple(names)
    if not names:
        raise InvalidArgumentError('No attrs specified')

    for name in names:
        try:
            if name not in target:
                continue
        except TypeError:
            # Unhashable, so it cannot be a member.
            continue
        target.remove(name)
        _logger.debug('%s attribute %r', operation, name)
