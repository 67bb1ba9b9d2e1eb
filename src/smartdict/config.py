import json
import tomllib
from logging import getLogger
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Mapping, cast

import yaml

_logger = getLogger(__name__)

# File suffix -> parser of the file's text
PARSERS: dict[str, Callable[[str], Any]] = {
    '.json': json.loads,
    '.yaml': yaml.safe_load,
    '.yml': yaml.safe_load,
    '.toml': tomllib.loads,
}


def load_config_file(path: str | PathLike[str] | Path) -> Mapping[str, Any]:
    """Load a configuration blob from disk.

    Parameters
    ----------
    path : str | PathLike[str] | Path
        Path to a file with one of the suffixes in ``PARSERS``; the suffix is
        matched case-insensitively.

    Returns
    -------
    Mapping[str, Any]
        The top-level mapping of the file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    RuntimeError
        If the suffix is not supported or the file does not contain a
        mapping at the top level.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    parse = PARSERS.get(suffix)
    if parse is None:
        raise RuntimeError(
            f'Unsupported config file type: {suffix}, supported extensions: {", ".join(PARSERS)}'
        )
    if not path.exists():
        raise FileNotFoundError(f'Config file not found: {path}')

    config = parse(path.read_text(encoding='utf-8'))
    if not isinstance(config, Mapping):
        raise RuntimeError(
            f'Config file must contain a mapping at the top level, got {type(config).__name__}'
        )

    _logger.debug('Loaded %d config entries from %s', len(config), path)
    return cast(Mapping[str, Any], config)
