# pyright: reportUnusedImport=false
from smartdict.config import load_config_file
from smartdict.errors import (
    InvalidArgumentError,
    KeyNotFoundError,
    NoSuchAttributeError,
    ProtectedAttributeError,
    SmartDictError,
)
from smartdict.resolver import ATTR_REGEXP, FORBIDDEN_ATTRS, is_attr_name
from smartdict.smart_dict import DEFAULT_PROTECTED_ATTRS, LooseSmartDict, SmartDict

__version__ = '0.1.0'
