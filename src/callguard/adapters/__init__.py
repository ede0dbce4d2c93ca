"""Call-site configurations of the retry engine.

- HttpAdapter/ApiClient: outbound HTTP with a per-attempt timeout
- DatabaseAdapter: data-store operations classified by driver code
- QueryClient: client-side query cache with read/mutation budgets
"""

from .database import DatabaseAdapter, StoreClient, StoreModel, default_db_policy, health_check_policy
from .http import ApiClient, HttpAdapter, default_http_policy
from .query import (
    QUERY_PRESETS,
    QueryClient,
    QueryEntry,
    QueryOptions,
    default_mutation_policy,
    default_query_policy,
)

__all__ = [
    # HTTP
    "HttpAdapter", "ApiClient", "default_http_policy",
    # Database
    "DatabaseAdapter", "StoreClient", "StoreModel", "default_db_policy", "health_check_policy",
    # Query cache
    "QueryClient", "QueryOptions", "QueryEntry", "QUERY_PRESETS",
    "default_query_policy", "default_mutation_policy",
]
