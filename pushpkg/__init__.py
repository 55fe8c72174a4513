from .config import PushPackageConfig, IconSet, config_from_env, config_from_json
from .errors import PushPackageError
from .package import PushPackage, PrebuiltPushPackage

__version__ = "0.1.0"

__all__ = [
    "PushPackageConfig", "IconSet", "config_from_env", "config_from_json",
    "PushPackageError", "PushPackage", "PrebuiltPushPackage",
]
