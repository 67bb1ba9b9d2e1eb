import re
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Any

from smartdict.errors import (
    KeyNotFoundError,
    NoSuchAttributeError,
    ProtectedAttributeError,
    SmartDictError,
)

# Attribute name grammar, without anchors.
ATTR_REGEXP = re.compile(r'[a-zA-Z_]\w*', re.ASCII)

# Names that are never treated as attributes. They always resolve to the
# properties of the same name on the record.
FORBIDDEN_ATTRS: frozenset[str] = frozenset({'default', 'default_factory', 'strict'})


class Access(Enum):
    READ = 'read'
    WRITE = 'write'
    DELETE = 'delete'


class Action(Enum):
    """
    What the record should do with an attribute request.

    DEFER_TO_HOST: use the regular attribute behavior of the class
    READ_ENTRY: read the value from the underlying dict
    WRITE_ENTRY: store the value in the underlying dict
    DELETE_ENTRY: remove the key from the underlying dict
    REJECT: raise ``Decision.error``
    """

    DEFER_TO_HOST = 'defer_to_host'
    READ_ENTRY = 'read_entry'
    WRITE_ENTRY = 'write_entry'
    DELETE_ENTRY = 'delete_entry'
    REJECT = 'reject'


@dataclass(frozen=True)
class Decision:
    action: Action
    error: type[SmartDictError] | None = None
    message: str | None = None

    def exception(self) -> SmartDictError:
        if self.error is None:
            raise RuntimeError(f'Decision {self.action.name} carries no error')
        return self.error(self.message)


DEFER_TO_HOST = Decision(Action.DEFER_TO_HOST)
READ_ENTRY = Decision(Action.READ_ENTRY)
WRITE_ENTRY = Decision(Action.WRITE_ENTRY)
DELETE_ENTRY = Decision(Action.DELETE_ENTRY)


def is_attr_name(value: Any) -> bool:
    """Return ``True`` if ``value`` is a ``str`` matching the attribute grammar."""
    return isinstance(value, str) and ATTR_REGEXP.fullmatch(value) is not None


def is_special_name(name: str) -> bool:
    """Return ``True`` for ``__dunder__`` names owned by the Python data model."""
    return len(name) > 4 and name.startswith('__') and name.endswith('__')


def resolve(
    name: str,
    access: Access,
    *,
    strict: bool = True,
    declared: bool = False,
    protected: bool = False,
    present: bool = False,
    host_names: AbstractSet[str] = frozenset(),
) -> Decision:
    """
    Decide how an attribute request on a record is satisfied.

    Parameters
    ----------
    name : str
        The attribute name being read, assigned or deleted.
    access : Access
        The kind of request.
    strict : bool, optional
        Strict mode of the record, by default True. Only affects reads.
    declared : bool, optional
        Whether ``name`` is in the record's declared attributes.
    protected : bool, optional
        Whether ``name`` is in the record's protected attributes.
    present : bool, optional
        Whether ``name`` is a key of the underlying dict.
    host_names : AbstractSet[str], optional
        Names the record's class already defines (methods, properties, ...).

    Returns
    -------
    Decision
        The action to take. ``REJECT`` decisions carry the exception class
        and message to raise.

    Notes
    -----
    Stored keys take precedence over class members of the same name, so
    ``record.size = 'XL'`` shadows a ``size`` method once assigned. Declared
    names take that precedence before any value is stored.
    """
    if name in FORBIDDEN_ATTRS or is_special_name(name):
        return DEFER_TO_HOST

    match access:
        case Access.READ:
            return _resolve_read(name, strict, declared, present, host_names)
        case Access.WRITE:
            if protected and is_attr_name(name):
                return _protected(name)
            return WRITE_ENTRY
        case Access.DELETE:
            if protected and is_attr_name(name):
                return _protected(name)
            if present:
                return DELETE_ENTRY
            return _no_such_attribute(name)

    raise ValueError(f'Unsupported access kind: {access!r}')


def _resolve_read(
    name: str, strict: bool, declared: bool, present: bool, host_names: AbstractSet[str]
) -> Decision:
    if not is_attr_name(name):
        # Keys like 'young?' are reachable through item access only.
        return DEFER_TO_HOST if name in host_names else _no_such_attribute(name)

    if declared or present:
        if strict and not present:
            return Decision(Action.REJECT, KeyNotFoundError, f'key not found: {name!r}')
        return READ_ENTRY

    if name in host_names:
        return DEFER_TO_HOST

    if strict:
        return _no_such_attribute(name)
    return READ_ENTRY


def _protected(name: str) -> Decision:
    return Decision(Action.REJECT, ProtectedAttributeError, f'Attribute {name!r} is protected')


def _no_such_attribute(name: str) -> Decision:
    return Decision(Action.REJECT, NoSuchAttributeError, f'No attribute or key {name!r}')
