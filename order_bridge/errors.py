class BridgeError(Exception):
    """Base error for the order bridge."""


class BrokerConfigError(BridgeError):
    """Broker settings are missing or unusable."""


class BrokerConnectionError(BridgeError):
    """Connecting to or publishing on the broker failed."""
