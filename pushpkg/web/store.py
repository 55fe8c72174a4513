from typing import Callable, List, Optional, Protocol


class DeviceStore(Protocol):
    """Where device tokens live is up to the application."""

    def add_device(self, authentication_token: str, device_token: str) -> None: ...

    def delete_device(self, authentication_token: str, device_token: str) -> None: ...


LogSink = Callable[[List[str]], None]

# user authentication token -> device token, None (or "") when unknown
DeviceLookup = Callable[[str], Optional[str]]

# (json payload, device token); delivery to APNs is the caller's concern
PushSender = Callable[[bytes, str], None]
