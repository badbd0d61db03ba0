"""Base protocol for pipeline handlers."""

from typing import Protocol, TypeVar

from content_assistant.core.types import Result
from content_assistant.exceptions import ContentAssistantError

# Contravariant input (handlers can accept supertypes), invariant output
T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=ContentAssistantError)


class BaseAsyncHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for asynchronous pipeline handlers.

    Each handler performs a single transformation and reports failure as data,
    so the relay decides in one place how an error reaches the client.
    """

    async def handle(self, command: T_In) -> Result[T_Out, T_Error]:
        """Process the output of the previous stage.

        Args:
            command: The value produced by the previous pipeline stage.

        Returns:
            A Result object containing either the next value or an error.
        """
        ...
