"""Acquisition strategies.

Implements the mode-agnostic acquirer pattern (Strategy pattern):
- Acquirer: Abstract base class defining start / reset / teardown
- RetryingAcquirer: EPIC still images with cache, retry, and endpoint fallback
- FailoverSequencer: live streams with ordered failover and a liveness watchdog
- CacheStore: single-slot TTL cache shared through ``EngineContext``
"""

from earthfeed.acquisition.base import (
    AcquisitionExhausted,
    Acquirer,
    EmptyResult,
    EngineContext,
    ImageAttemptError,
    PlayerError,
    RateLimited,
    RequestTimeout,
    ServiceUnavailable,
    SourceExhausted,
    StreamEnded,
    StreamFailure,
    StreamStalled,
    TransportError,
    UpstreamError,
)
from earthfeed.acquisition.cache import CacheStore
from earthfeed.acquisition.failover import FailoverSequencer, SequencerState, StreamPlayer
from earthfeed.acquisition.network import HttpxNetworkClient, NetworkClient, NetworkResponse
from earthfeed.acquisition.retrying import RetryingAcquirer

__all__ = [
    "AcquisitionExhausted",
    "Acquirer",
    "CacheStore",
    "EmptyResult",
    "EngineContext",
    "FailoverSequencer",
    "HttpxNetworkClient",
    "ImageAttemptError",
    "NetworkClient",
    "NetworkResponse",
    "PlayerError",
    "RateLimited",
    "RequestTimeout",
    "RetryingAcquirer",
    "SequencerState",
    "ServiceUnavailable",
    "SourceExhausted",
    "StreamEnded",
    "StreamFailure",
    "StreamPlayer",
    "StreamStalled",
    "TransportError",
    "UpstreamError",
]
