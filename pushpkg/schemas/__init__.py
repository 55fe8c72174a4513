from .website import WebsiteDescriptor
from .callbacks import LogRequest

__all__ = ["WebsiteDescriptor", "LogRequest"]
