from .payload import build_push_payload
from .push_package import PushPackage, PrebuiltPushPackage, build_push_package, pad_authentication_token

__all__ = ["PushPackage", "PrebuiltPushPackage", "build_push_package", "build_push_payload", "pad_authentication_token"]
