"""Flex Message conversion from block graphs to the LINE wire format."""

from .converter import MessageConverter, convert_container, linear_gradient

__all__ = [
    "MessageConverter",
    "convert_container",
    "linear_gradient",
]
