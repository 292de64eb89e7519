from .event import FlushOptions, FlushResult, TrackerEvent, TrackOptions

__all__ = ["FlushOptions", "FlushResult", "TrackerEvent", "TrackOptions"]
