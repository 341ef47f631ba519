from .recording import CalibrationBounds, Channel, RecordingHeader, SENTINEL
from .results import ConversionResult

__all__ = [
    "CalibrationBounds",
    "Channel",
    "RecordingHeader",
    "SENTINEL",
    "ConversionResult",
]
