from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import parse_qs

from .assemble import build_opportunity
from .config import AppConfig
from .fetcher import Fetch, fetch_html
from .ids import decode_id
from .links import is_trusted_url
from .pipeline import list_opportunities

logger = logging.getLogger(__name__)

_REASONS = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
}


@dataclass(slots=True)
class ApiResponse:
    status: int
    body: dict[str, Any]


def handle_request(
    params: Mapping[str, str],
    config: AppConfig,
    fetch: Fetch = fetch_html,
) -> ApiResponse:
    opportunity_id = params.get("id")
    if not opportunity_id:
        result_set = list_opportunities(config, fetch)
        return ApiResponse(status=200, body=result_set.to_dict())

    url = decode_id(opportunity_id)
    if not url or not is_trusted_url(url, config.crawl.trusted_domains):
        logger.info("Refusing lookup for id %r", opportunity_id)
        return ApiResponse(status=400, body={"error": "Invalid opportunity id."})

    opportunity = build_opportunity(url, "", config, fetch)
    if opportunity is None:
        return ApiResponse(status=404, body={"error": "Opportunity not found."})
    return ApiResponse(status=200, body={"opportunity": opportunity.to_dict()})


def create_app(config: AppConfig, fetch: Fetch = fetch_html) -> Callable[..., Iterable[bytes]]:
    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"
        method = environ.get("REQUEST_METHOD", "GET").upper()

        if path.rstrip("/") != config.serve.api_path.rstrip("/"):
            response = ApiResponse(status=404, body={"error": "Not found."})
        elif method != "GET":
            response = ApiResponse(status=405, body={"error": "Method not allowed."})
        else:
            query = parse_qs(environ.get("QUERY_STRING", ""))
            params = {key: values[0] for key, values in query.items() if values}
            response = handle_request(params, config, fetch)

        payload = json.dumps(response.body, ensure_ascii=False).encode("utf-8")
        status = f"{response.status} {_REASONS.get(response.status, '')}".strip()
        start_response(
            status,
            [
                ("Content-Type", "application/json; charset=utf-8"),
                ("Content-Length", str(len(payload))),
            ],
        )
        return [payload]

    return app
