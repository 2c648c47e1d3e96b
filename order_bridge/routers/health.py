from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from order_bridge.broker import BrokerChannel
from order_bridge.config import Settings
from order_bridge.deps import get_broker, get_settings
from order_bridge.schemas import DebugOut, HealthOut

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def root():
    return "OK"


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut()


@router.get("/debug", response_model=DebugOut)
def debug(settings: Settings = Depends(get_settings), broker: BrokerChannel = Depends(get_broker)):
    # never expose the raw URL, only the masked form
    return DebugOut(
        port=settings.port,
        queue=settings.queue_name,
        rabbitmq_url_set=settings.rabbitmq_url_set,
        rabbitmq_url_masked=settings.rabbitmq_url_masked,
        broker_connected=broker.is_connected,
    )
