from teamdash.gateways.auth import AuthGateway
from teamdash.gateways.result import Failure, Result, Success, unwrap
from teamdash.gateways.storage import StorageGateway
from teamdash.gateways.tables import QueryOptions, TableGateway

__all__ = [
    "AuthGateway",
    "Failure",
    "QueryOptions",
    "Result",
    "StorageGateway",
    "Success",
    "TableGateway",
    "unwrap",
]
