from typing import Optional

from pydantic import BaseModel


class HealthOut(BaseModel):
    status: str = "ok"


class DebugOut(BaseModel):
    port: int
    queue: str
    rabbitmq_url_set: bool
    rabbitmq_url_masked: Optional[str] = None
    broker_connected: bool


class OrderQueuedOut(BaseModel):
    message: str = "Order received"
    queued: bool = True


class ErrorOut(BaseModel):
    error: str
    detail: Optional[str] = None
