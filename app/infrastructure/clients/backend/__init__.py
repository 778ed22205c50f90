"""Backend-as-a-service client.

Exports:
    BackendClient: Tables, storage, auth and function invocation
    TableQuery: Query builder for table reads and writes
    quote_value: Quote a value inside an ``or`` expression
"""

from infrastructure.clients.backend.client import BackendClient
from infrastructure.clients.backend.query import TableQuery, quote_value

__all__ = ["BackendClient", "TableQuery", "quote_value"]
