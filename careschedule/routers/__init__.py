# careschedule/routers/__init__.py
from . import availability
from . import health
from . import slots

__all__ = ["availability", "health", "slots"]
