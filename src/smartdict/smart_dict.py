import json
from logging import getLogger
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Mapping, Self

from smartdict.config import load_config_file
from smartdict.policy import add_attr_names, discard_attr_names
from smartdict.resolver import Access, Action, is_attr_name, resolve

_logger = getLogger(__name__)

# Conversion and representation methods of the record. Overwriting them by
# accident is confusing, so they start out protected.
DEFAULT_PROTECTED_ATTRS: frozenset[str] = frozenset({'to_dict', 'to_json'})

DefaultFactory = Callable[['SmartDict', Any], Any]

_STATE_SLOTS = ('_strict', '_declared_attrs', '_protected_attrs', '_default', '_default_factory')

# Internal state is always accessed through these to bypass attribute
# resolution, since stored keys may shadow any attribute name.
_get = object.__getattribute__
_set = object.__setattr__


class SmartDict(dict):
    """
    Dictionary whose keys can also be read and written as attributes.

    Attribute access is routed through :func:`smartdict.resolver.resolve`,
    while item access (``record[key]``) is plain ``dict`` behavior and is
    never affected by strictness, declaration or protection.

    Parameters
    ----------
    *args, **kwargs
        Initial entries, accepted in the same forms as ``dict``.

    Attributes
    ----------
    strict : bool
        When true (the default), reading an unknown attribute raises
        :class:`~smartdict.errors.NoSuchAttributeError` and reading a
        declared but unset attribute raises
        :class:`~smartdict.errors.KeyNotFoundError`. When false both return
        the default value instead.
    declared_attrs : set[str]
        Names that always read as attributes, even when the class defines a
        member of the same name and no value has been stored yet.
    protected_attrs : set[str]
        Names that cannot be assigned as attributes.
    default, default_factory
        Value, or ``(record, key)`` callable, used for absent keys on item
        access and on loose attribute reads.

    Notes
    -----
    - ``default``, ``default_factory`` and ``strict`` are never attributes,
      and neither are ``__dunder__`` names.
    - A stored key shadows a method of the same name: after
      ``record.keys = 1`` the ``keys`` attribute reads as ``1``. Code that
      looks up ``dict`` methods on the instance breaks on such records,
      ``json.dumps`` included (it calls ``record.items()``). Serialize them
      with :meth:`to_json` or :meth:`to_dict`, and call methods through the
      class (``dict.keys(record)``) where keys may shadow them.

    Examples
    --------
    >>> person = SmartDict(name='John')
    >>> person.name
    'John'
    >>> person.age = 42
    >>> person['age']
    42
    >>> person.declare('size')
    >>> person.size
    Traceback (most recent call last):
    ...
    smartdict.errors.KeyNotFoundError: "key not found: 'size'"
    """

    __slots__ = _STATE_SLOTS

    _host_attrs_: frozenset[str]

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        _set(self, '_strict', True)
        _set(self, '_declared_attrs', set())
        _set(self, '_protected_attrs', set(DEFAULT_PROTECTED_ATTRS))
        _set(self, '_default', None)
        _set(self, '_default_factory', None)
        super().__init__(*args, **kwargs)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._host_attrs_ = _member_names(cls)

    @classmethod
    def from_file(cls, path: str | PathLike[str] | Path) -> Self:
        """Create a record from a ``.json``, ``.yaml``/``.yml`` or ``.toml`` file."""
        return cls(load_config_file(path))

    # Attribute resolution

    def __getattribute__(self, name: str) -> Any:
        decision = resolve(
            name,
            Access.READ,
            strict=_get(self, '_strict'),
            declared=name in _get(self, '_declared_attrs'),
            present=dict.__contains__(self, name),
            host_names=type(self)._host_attrs_,
        )
        match decision.action:
            case Action.DEFER_TO_HOST:
                return _get(self, name)
            case Action.READ_ENTRY:
                return self[name]
            case _:
                raise decision.exception()

    def __setattr__(self, name: str, value: Any) -> None:
        decision = resolve(
            name,
            Access.WRITE,
            protected=name in _get(self, '_protected_attrs'),
        )
        match decision.action:
            case Action.DEFER_TO_HOST:
                _set(self, name, value)
            case Action.WRITE_ENTRY:
                self[name] = value
            case _:
                _logger.debug('Rejected assignment to protected attribute %r', name)
                raise decision.exception()

    def __delattr__(self, name: str) -> None:
        decision = resolve(
            name,
            Access.DELETE,
            protected=name in _get(self, '_protected_attrs'),
            present=dict.__contains__(self, name),
        )
        match decision.action:
            case Action.DEFER_TO_HOST:
                object.__delattr__(self, name)
            case Action.DELETE_ENTRY:
                del self[name]
            case _:
                raise decision.exception()

    def __dir__(self) -> list[str]:
        attrs = {key for key in dict.keys(self) if is_attr_name(key)}
        return sorted(type(self)._host_attrs_ | attrs)

    # Map behavior

    def __missing__(self, key: Any) -> Any:
        factory = _get(self, '_default_factory')
        if factory is not None:
            return factory(self, key)
        return _get(self, '_default')

    def __repr__(self) -> str:
        return f'{type(self).__name__}({dict.__repr__(self)})'

    def __or__(self, other: Any) -> Self:
        if not isinstance(other, dict):
            return NotImplemented
        merged = type(self).copy(self)
        dict.update(merged, other)
        return merged

    def __getstate__(self) -> dict[str, Any]:
        return {slot: _get(self, slot) for slot in _STATE_SLOTS}

    def __setstate__(self, state: dict[str, Any]) -> None:
        for slot, value in state.items():
            _set(self, slot, set(value) if isinstance(value, set) else value)

    def __reduce__(self) -> tuple[Any, ...]:
        # Entries are restored through item assignment after the new record
        # is memoized, so self-referencing records copy and pickle correctly.
        state = type(self).__getstate__(self)
        return (type(self), (), state, None, iter(dict.items(self)))

    def copy(self) -> Self:
        """Return a shallow copy that keeps strictness, defaults and policies."""
        clone = type(self)(self)
        type(self).__setstate__(clone, type(self).__getstate__(self))
        return clone

    def to_dict(self) -> dict[Any, Any]:
        """Return the entries as a plain ``dict``.

        Nested records and other mappings become plain ``dict`` objects, and
        lists and tuples are converted item by item.

        Raises
        ------
        ValueError
            If the record contains itself, directly or through nested values.
        """
        return _to_plain(self, set())

    def to_json(self, **kwargs: Any) -> str:
        """Serialize the entries to a JSON string.

        Keyword arguments are passed to :func:`json.dumps`; ``indent=4`` and
        ``ensure_ascii=False`` are used unless overridden.
        """
        kwargs.setdefault('indent', 4)
        kwargs.setdefault('ensure_ascii', False)
        return json.dumps(SmartDict.to_dict(self), **kwargs)

    # Policy controls

    @property
    def strict(self) -> bool:
        return _get(self, '_strict')

    @strict.setter
    def strict(self, value: bool) -> None:
        _set(self, '_strict', bool(value))

    @property
    def default(self) -> Any:
        return _get(self, '_default')

    @default.setter
    def default(self, value: Any) -> None:
        _set(self, '_default', value)
        _set(self, '_default_factory', None)

    @property
    def default_factory(self) -> DefaultFactory | None:
        return _get(self, '_default_factory')

    @default_factory.setter
    def default_factory(self, value: DefaultFactory | None) -> None:
        if value is not None and not callable(value):
            raise TypeError(
                f'default_factory must be callable or None, not {type(value).__name__}'
            )
        _set(self, '_default_factory', value)
        _set(self, '_default', None)

    @property
    def declared_attrs(self) -> set[str]:
        """The live set of declared attribute names. May be mutated directly."""
        return _get(self, '_declared_attrs')

    @property
    def protected_attrs(self) -> set[str]:
        """The live set of protected attribute names. May be mutated directly."""
        return _get(self, '_protected_attrs')

    def declare(self, *attrs: str) -> None:
        """Declare attributes.

        Declared names always read from the dictionary, so a method of the
        same name never answers for them.

        >>> person = SmartDict()
        >>> person.declare('size')
        >>> person.size = 'XL'
        >>> person.size
        'XL'

        Raises
        ------
        InvalidArgumentError
            If no names are given, or a name is not a valid attribute name.
            Names before the invalid one stay declared.
        """
        add_attr_names(_get(self, '_declared_attrs'), attrs, operation='Declared')

    def undeclare(self, *attrs: Any) -> None:
        discard_attr_names(_get(self, '_declared_attrs'), attrs, operation='Undeclared')

    def protect(self, *attrs: str) -> None:
        """Protect attributes from being assigned.

        >>> person = SmartDict(name='John')
        >>> person.protect('name')
        >>> person.name = 'Bob'
        Traceback (most recent call last):
        ...
        smartdict.errors.ProtectedAttributeError: Attribute 'name' is protected

        Item assignment (``person['name'] = 'Bob'``) is not affected.
        """
        add_attr_names(_get(self, '_protected_attrs'), attrs, operation='Protected')

    def unprotect(self, *attrs: Any) -> None:
        discard_attr_names(_get(self, '_protected_attrs'), attrs, operation='Unprotected')


def _member_names(cls: type[SmartDict]) -> frozenset[str]:
    # The name set is assigned after dir() runs, so include it explicitly.
    return frozenset(dir(cls)) | {'_host_attrs_'}


SmartDict._host_attrs_ = _member_names(SmartDict)


class LooseSmartDict(SmartDict):
    """Non-strict ``SmartDict``.

    ``LooseSmartDict()`` is equivalent to ``SmartDict()`` followed by
    ``strict = False``.
    """

    __slots__ = ()

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        _set(self, '_strict', False)


def _to_plain(value: Any, active: set[int]) -> Any:
    if not isinstance(value, (Mapping, list, tuple)):
        return value

    # ids of the containers being converted, for cycle detection as in json
    marker = id(value)
    if marker in active:
        raise ValueError('Circular reference detected')
    active.add(marker)

    if isinstance(value, Mapping):
        # dict.items, since a stored 'items' key shadows the method
        items = dict.items(value) if isinstance(value, dict) else value.items()
        plain: Any = {key: _to_plain(item, active) for key, item in items}
    elif isinstance(value, list):
        plain = [_to_plain(item, active) for item in value]
    else:
        plain = tuple(_to_plain(item, active) for item in value)

    active.remove(marker)
    return plain
