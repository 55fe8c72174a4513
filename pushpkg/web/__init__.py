from .routes import build_router, create_app
from .store import DeviceLookup, DeviceStore, LogSink, PushSender

__all__ = ["build_router", "create_app", "DeviceLookup", "DeviceStore", "LogSink", "PushSender"]
