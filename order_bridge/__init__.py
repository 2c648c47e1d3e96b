"""HTTP-to-RabbitMQ order bridge."""

__version__ = "1.0.0"
