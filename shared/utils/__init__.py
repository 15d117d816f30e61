"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    RelayError,
    UnknownConnectionError,
    InvalidInputError,
    NotNamedError,
    DeliveryFailedError,
)

__all__ = [
    "RelayError",
    "UnknownConnectionError",
    "InvalidInputError",
    "NotNamedError",
    "DeliveryFailedError",
]
