from gifcapture.core.events.capture_events import CaptureFallbackTriggered, FrameCaptured

__all__ = [
    "FrameCaptured",
    "CaptureFallbackTriggered",
]
