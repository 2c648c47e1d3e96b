import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from order_bridge.broker import BrokerChannel
from order_bridge.config import mask_url
from order_bridge.deps import get_broker
from order_bridge.errors import BridgeError
from order_bridge.schemas import ErrorOut, OrderQueuedOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def is_json_content_type(content_type: Optional[str]) -> bool:
    """application/json or any application/*+json, parameters ignored."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


def decode_order(raw: bytes):
    """Strict JSON parse; NaN and Infinity are rejected."""
    return json.loads(raw, parse_constant=_reject_constant)


def encode_order(order) -> str:
    """Compact JSON text, key order kept, non-ASCII left as is."""
    # numbers like 1e400 parse to inf and must not leave as Infinity
    return json.dumps(order, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def _error(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorOut(error=error, detail=detail).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/", include_in_schema=False)
@router.post(
    "",
    response_model=OrderQueuedOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def create_order(request: Request, broker: BrokerChannel = Depends(get_broker)):
    # non-JSON content types are treated as having no body
    if not is_json_content_type(request.headers.get("content-type")):
        return _error(400, "Missing JSON body")

    raw = await request.body()
    if not raw.strip():
        return _error(400, "Missing JSON body")

    try:
        order = decode_order(raw)
    except ValueError:
        return _error(400, "Invalid JSON body")

    # only non-empty objects or arrays count as an order
    if not isinstance(order, (dict, list)) or len(order) == 0:
        return _error(400, "Missing JSON body")

    try:
        msg = encode_order(order)
    except ValueError:
        return _error(400, "Invalid JSON body")

    try:
        await run_in_threadpool(broker.publish, msg.encode("utf-8"))
    except BridgeError as e:
        logger.error(f"Order error: {e}")
        return _error(500, "Error connecting to RabbitMQ", mask_url(str(e)))

    logger.info(f"Sent order to queue: {msg}")
    return OrderQueuedOut()
