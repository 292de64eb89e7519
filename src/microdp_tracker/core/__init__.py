from .config import TrackerConfig
from .errors import DeliveryError, TrackerError
from .tracker import Tracker, TrackerState
from .version import __version__

__all__ = [
    "Tracker",
    "TrackerConfig",
    "TrackerState",
    "TrackerError",
    "DeliveryError",
    "__version__",
]
