from fastapi import Request

from order_bridge.broker import BrokerChannel
from order_bridge.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_broker(request: Request) -> BrokerChannel:
    return request.app.state.broker
