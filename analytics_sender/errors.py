from typing import Optional


class AnalyticsSenderError(Exception):
    """
    Base exception for analytics-sender errors.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An unexpected error occurred while delivering events."):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(AnalyticsSenderError):
    """
    Error raised when worker options are invalid.

    Args:
        option (str): The offending option name.
        reason (str): Why the value was rejected.
    """
    def __init__(self, option: str, reason: str):
        self.option = option
        super().__init__(f"Invalid option '{option}': {reason}")


class SerializationError(AnalyticsSenderError):
    """
    Error raised when a message cannot be turned into a payload fragment.

    Args:
        reason (str): Underlying failure description.
    """
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unable to serialize message: {reason}")


class MessageTooLargeError(SerializationError):
    """
    Error raised when a serialized message exceeds the per-message byte limit.

    Args:
        size (int): Serialized size in bytes.
        limit (int): Maximum allowed size in bytes.
    """
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"message is {size} bytes, exceeding the maximum allowed size of {limit} bytes")


class BatchFullError(AnalyticsSenderError):
    """
    Error raised when a message is appended to a batch with no room left.

    Args:
        capacity (Optional[int]): The batch capacity, when the count cap was hit.
    """
    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity
        detail = f" (capacity {capacity})" if capacity is not None else ""
        super().__init__(f"Batch is full{detail}; start a new batch.")
