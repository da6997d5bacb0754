"""geotrail - bounded, obfuscated position history on a remote document store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("geotrail")
except PackageNotFoundError:
    __version__ = "0+local"
from geotrail._crypto import XorCodec, xor_decode, xor_encode
from geotrail._store import RemoteStore, StoredRecord
from geotrail._store.memory import InMemoryRemoteStore
from geotrail._store.rest import RestRemoteStore
from geotrail.client import TrailClient
from geotrail.config import TrailConfig
from geotrail.exceptions import CodecError, ConfigError, GeoTrailError, RemoteStoreError
from geotrail.geo import distance_between, distance_meters
from geotrail.history import RouteSummary, newest_first, route, route_summary
from geotrail.logcapture import LogCapture, LogCaptureHandler
from geotrail.models import EncodedRecord, LogEntry, PositionFix, PositionRecord
from geotrail.retention import RetentionStore
from geotrail.sampler import PositionSampler, PositionSource

__all__ = [
    "__version__",
    "CodecError",
    "ConfigError",
    "EncodedRecord",
    "GeoTrailError",
    "InMemoryRemoteStore",
    "LogCapture",
    "LogCaptureHandler",
    "LogEntry",
    "PositionFix",
    "PositionRecord",
    "PositionSampler",
    "PositionSource",
    "RemoteStore",
    "RemoteStoreError",
    "RestRemoteStore",
    "RetentionStore",
    "RouteSummary",
    "StoredRecord",
    "TrailClient",
    "TrailConfig",
    "XorCodec",
    "distance_between",
    "distance_meters",
    "newest_first",
    "route",
    "route_summary",
    "xor_decode",
    "xor_encode",
]
