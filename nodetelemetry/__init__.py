# Node Telemetry package
from .models import DeviceStatus, SyncChain
from .status import StatusStore
from .rpc import RpcClient, JsonRpcRequest, JsonRpcResponse
from .reporter import Reporter, start_update_status
from .errors import TelemetryError, TransportError, ResponseDecodeError, StatusDecodeError

__all__ = [
    'DeviceStatus', 'SyncChain', 'StatusStore',
    'RpcClient', 'JsonRpcRequest', 'JsonRpcResponse',
    'Reporter', 'start_update_status',
    'TelemetryError', 'TransportError', 'ResponseDecodeError', 'StatusDecodeError',
]
