"""
RabbitMQ channel manager.
Holds one lazily created connection/channel and drops it after a failure so
the next request reconnects.
"""

import logging
import threading
from typing import Optional

import pika
from pika.adapters.blocking_connection import BlockingChannel

from order_bridge.config import Settings, mask_url
from order_bridge.errors import BrokerConfigError, BrokerConnectionError

logger = logging.getLogger(__name__)


class BrokerChannel:
    """Shared publish channel for the configured queue"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.connection: Optional[pika.BlockingConnection] = None
        self.channel: Optional[BlockingChannel] = None
        # pika's BlockingConnection is not thread safe
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.connection.is_open

    def _is_usable(self) -> bool:
        return (
            self.channel is not None
            and self.connection is not None
            and self.connection.is_open
            and self.channel.is_open
        )

    def _connect(self) -> BlockingChannel:
        """Open a connection and declare the queue"""
        if not self.settings.rabbitmq_url:
            raise BrokerConfigError("RABBITMQ_URL is not set")

        masked = mask_url(self.settings.rabbitmq_url)
        try:
            parameters = pika.URLParameters(self.settings.rabbitmq_url)
            connection = pika.BlockingConnection(parameters)
        except (pika.exceptions.AMQPError, ValueError) as e:
            logger.error(f"RabbitMQ connection to {masked} failed: {mask_url(str(e))}")
            raise BrokerConnectionError(mask_url(str(e)) or type(e).__name__) from e

        try:
            channel = connection.channel()
            channel.queue_declare(queue=self.settings.queue_name, durable=False)
        except pika.exceptions.AMQPError as e:
            logger.error(f"Declaring queue '{self.settings.queue_name}' failed: {e}")
            self._close_quietly(connection)
            raise BrokerConnectionError(mask_url(str(e)) or type(e).__name__) from e

        self.connection = connection
        self.channel = channel
        logger.info(f"Connected to RabbitMQ at {masked}, queue '{self.settings.queue_name}'")
        return channel

    def get_channel(self) -> BlockingChannel:
        """
        Return the cached channel, connecting first if there is none or the
        previous one was closed.

        Raises:
            BrokerConfigError: broker URL is unset
            BrokerConnectionError: broker is unreachable
        """
        with self._lock:
            return self._get_channel()

    def _get_channel(self) -> BlockingChannel:
        if self._is_usable():
            return self.channel

        if self.connection is not None:
            logger.warning("RabbitMQ connection lost, reconnecting...")
            self._drop()

        return self._connect()

    def publish(self, body: bytes) -> None:
        """Send ``body`` to the configured queue through the default exchange"""
        with self._lock:
            channel = self._get_channel()
            try:
                channel.basic_publish(
                    exchange="",
                    routing_key=self.settings.queue_name,
                    body=body,
                    properties=pika.BasicProperties(content_type="application/json"),
                )
            except pika.exceptions.AMQPError as e:
                logger.error(f"Failed to publish message: {mask_url(str(e))}")
                self._drop()
                raise BrokerConnectionError(mask_url(str(e)) or type(e).__name__) from e

    def reset(self) -> None:
        with self._lock:
            self._drop()

    def close(self) -> None:
        with self._lock:
            if self.connection is not None:
                self._close_quietly(self.connection)
                logger.info("RabbitMQ connection closed")
            self.connection = None
            self.channel = None

    def _drop(self) -> None:
        connection = self.connection
        self.connection = None
        self.channel = None
        if connection is not None:
            self._close_quietly(connection)

    @staticmethod
    def _close_quietly(connection: pika.BlockingConnection) -> None:
        try:
            if connection.is_open:
                connection.close()
        except pika.exceptions.AMQPError as e:
            logger.warning(f"Error closing RabbitMQ connection: {e}")
