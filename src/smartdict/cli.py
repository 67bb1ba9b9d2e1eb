import argparse
import logging
import sys
from logging import getLogger
from pathlib import Path
from typing import Any, Mapping

import yaml

from smartdict.config import load_config_file
from smartdict.errors import SmartDictError
from smartdict.resolver import is_attr_name
from smartdict.smart_dict import LooseSmartDict, SmartDict

_logger = getLogger(__name__)

# A dotted override key, e.g. ('db', 'port') for --db.port
KeyPath = tuple[str, ...]


def default_argparser(description: str = 'Inspect a configuration blob as a SmartDict') -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=description,
        allow_abbrev=False,
        epilog='Any other --key[.nested] VALUE or --key=VALUE pair overrides the loaded config.',
    )
    parser.add_argument(
        '-c',
        '--config',
        type=Path,
        default=None,
        help='Optional, path to a configuration file (supported extensions: *.json, *.yaml/yml, *.toml)',
    )
    parser.add_argument(
        '-g',
        '--get',
        action='append',
        default=[],
        metavar='NAME',
        help='Attribute to print, dotted for nested records; may be repeated. '
        'Prints the whole record as JSON when omitted.',
    )
    parser.add_argument(
        '--loose',
        action='store_true',
        help='Read attributes in loose mode: unknown names print as None instead of failing.',
    )
    parser.add_argument('--log-level', default='WARNING', help='Logging level.')

    return parser


def parse_overrides(tokens: list[str]) -> list[tuple[KeyPath, Any]]:
    """Turn leftover command line tokens into ``(key path, value)`` pairs.

    ``--db.port 5433`` and ``--db.port=5433`` both give ``(('db', 'port'), 5433)``.
    Values are read as YAML scalars, so ``true``, ``3`` and ``2.5`` keep their
    types. A key without a value is a flag and becomes ``True``.

    Raises
    ------
    ValueError
        For a value token that follows no key, or a key segment that is not
        a valid attribute name.
    """
    overrides: list[tuple[KeyPath, Any]] = []
    pending: KeyPath | None = None

    for token in tokens:
        if token.startswith('--'):
            if pending is not None:
                overrides.append((pending, True))
            key, has_value, raw = token[2:].partition('=')
            path = _key_path(key)
            if has_value:
                overrides.append((path, _parse_value(raw)))
                pending = None
            else:
                pending = path
        elif pending is not None:
            overrides.append((pending, _parse_value(token)))
            pending = None
        else:
            raise ValueError(f'Unexpected argument {token!r}, expected --key VALUE')

    if pending is not None:
        overrides.append((pending, True))
    return overrides


def apply_override(record: SmartDict, path: KeyPath, value: Any) -> None:
    """Store ``value`` at ``path``, creating nested records of the same class as needed."""
    target = record
    for depth, part in enumerate(path[:-1]):
        child = dict.get(target, part)
        if child is None:
            child = target[part] = type(record)()
        elif not isinstance(child, SmartDict):
            prefix = '.'.join(path[: depth + 1])
            raise ValueError(f'Cannot override {".".join(path)}: {prefix} is not a mapping')
        target = child
    target[path[-1]] = value


def read_path(record: SmartDict, name: str) -> Any:
    """Read a dotted attribute path, so strictness applies at every level."""
    value: Any = record
    for part in name.split('.'):
        value = getattr(value, part)
    return value


def to_records(mapping: Mapping[str, Any], record_class: type[SmartDict]) -> SmartDict:
    """Build a record from ``mapping``, turning nested mappings into records too."""
    return record_class({key: _to_record_value(value, record_class) for key, value in mapping.items()})


def _to_record_value(value: Any, record_class: type[SmartDict]) -> Any:
    if isinstance(value, Mapping):
        return to_records(value, record_class)
    if isinstance(value, list):
        return [_to_record_value(item, record_class) for item in value]
    return value


def _key_path(key: str) -> KeyPath:
    path = tuple(key.split('.'))
    for part in path:
        if not is_attr_name(part):
            raise ValueError(f'Invalid override key --{key}: {part!r} is not an attribute name')
    return path


def _parse_value(raw: str) -> Any:
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    # Only scalars keep their YAML type; dates, lists and empty values stay text.
    if isinstance(value, (bool, int, float, str)):
        return value
    return raw


def main(argv: list[str] | None = None) -> int:
    parser = default_argparser()
    args, extra = parser.parse_known_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    try:
        overrides = parse_overrides(extra)
    except ValueError as ex:
        parser.error(str(ex))

    record_class = LooseSmartDict if args.loose else SmartDict
    try:
        config = load_config_file(args.config) if args.config else {}
        record = to_records(config, record_class)
        for path, value in overrides:
            apply_override(record, path, value)
    except (FileNotFoundError, RuntimeError, ValueError) as ex:
        print(f'error: {ex}', file=sys.stderr)
        return 1
    _logger.info('Applied %d override(s) from the command line', len(overrides))

    if not args.get:
        print(SmartDict.to_json(record))
        return 0

    for name in args.get:
        try:
            value = read_path(record, name)
        except (SmartDictError, AttributeError) as ex:
            print(f'error: {ex}', file=sys.stderr)
            return 1
        print(SmartDict.to_json(value) if isinstance(value, SmartDict) else value)

    return 0


if __name__ == '__main__':
    sys.exit(main())
