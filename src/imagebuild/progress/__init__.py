from .channel import ChannelClosedError, StatusChannel
from .models import SolveStatus, Vertex, VertexLog, VertexStatus, VertexWarning
from .relay import ProgressRelay, RelayState

__all__ = [
    "ChannelClosedError",
    "ProgressRelay",
    "RelayState",
    "SolveStatus",
    "StatusChannel",
    "Vertex",
    "VertexLog",
    "VertexStatus",
    "VertexWarning",
]
