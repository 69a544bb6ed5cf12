"""
Cross-Border SDK — Quotes API

Requests time-bound FX proposals. Proposals are not cached: the caller
picks one (conventionally the first) and passes its id to a payment.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from crossborder_sdk.client import ApiClient
from crossborder_sdk.models import QuotesRequest, QuotesResponse

logger = logging.getLogger(__name__)


class QuotesAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_quote(
        self,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
        request: QuotesRequest,
    ) -> QuotesResponse:
        """
        POST a quote request for the given direction and fixed-side amount.

        Returns:
            QuotesResponse with zero or more proposals, in upstream order.

        Raises:
            ServiceFailure: rejected upstream (currency pair, entitlement, rate).
            ConfigurationError: no partner id available.
        """
        path, query = self.client.resolve_path(params, "/quotes")
        root, doc = self.client.execute(
            "POST", path, headers, query,
            root=QuotesRequest.ROOT, payload=request.to_wire(),
        )
        response = self.client.decode(QuotesResponse.from_wire, root, doc, QuotesResponse.ROOT)
        logger.info(
            "Quote %s (%s) returned %d proposal(s)",
            request.transaction_reference, request.quote_type.direction.value, len(response.proposals),
        )
        return response
