# src/lumicheck/clients/__init__.py
"""Upstream clients that count every external call on the CheckerContext.

Example:
    from lumicheck.clients import CountedHTTPClient, DatasetCatalogClient

    http = CountedHTTPClient(context, service="dbs", base_url=settings.dbs.base_url)
    catalog = DatasetCatalogClient(http, stream_timeout=180.0)
    summary = catalog.dataset_summary("/Primary/Processed/TIER")
"""

from lumicheck.clients.base import CountedClientBase
from lumicheck.clients.dbs import DatasetCatalogClient, DatasetSummary
from lumicheck.clients.http import CountedHTTPClient
from lumicheck.clients.reqmgr import WorkflowServiceClient

__all__ = [
    "CountedClientBase",
    "CountedHTTPClient",
    "DatasetCatalogClient",
    "DatasetSummary",
    "WorkflowServiceClient",
]
