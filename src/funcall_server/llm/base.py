"""Model client interface and backend registry.

The dispatch loop only talks to :class:`ModelClient`. Backends register
themselves under a name with :func:`register_backend` and are instantiated
from settings by :func:`create_model_client`.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from funcall_server.llm.types import Message, ModelReply

if TYPE_CHECKING:
    from funcall_server.config import FuncallServerSettings

logger = logging.getLogger(__name__)

_BACKENDS: dict[str, Callable[["FuncallServerSettings"], "ModelClient"]] = {}


def register_backend(
    name: str,
) -> Callable[[Callable[["FuncallServerSettings"], "ModelClient"]], Callable]:
    """Decorator registering a client factory under *name*."""

    def wrapper(
        factory: Callable[["FuncallServerSettings"], "ModelClient"],
    ) -> Callable[["FuncallServerSettings"], "ModelClient"]:
        _BACKENDS[name] = factory
        return factory

    return wrapper


def available_backends() -> list[str]:
    """Names of the registered backends."""
    return sorted(_BACKENDS)


def create_model_client(settings: "FuncallServerSettings") -> "ModelClient":
    """Instantiate the client selected by ``settings.model_backend``.

    Raises:
        ValueError: If the backend name is not registered.
    """
    backend = settings.model_backend.lower()
    factory = _BACKENDS.get(backend)
    if factory is None:
        raise ValueError(
            f"Model backend '{settings.model_backend}' is not registered. "
            f"Available: {available_backends()}"
        )
    logger.info(f"Creating '{backend}' model client for model {settings.model}")
    return factory(settings)


class ModelClient(ABC):
    """Async client for a chat-completion service with tool calling.

    Attributes:
        backend: Registered backend name.
        host: Base URL of the service.
        model: Model name sent with every request.
    """

    backend: str = ""

    def __init__(self, host: str, model: str) -> None:
        self.host = host
        self.model = model

    @abstractmethod
    async def decide(
        self, messages: Sequence[Message], tools: list[dict[str, Any]]
    ) -> ModelReply:
        """Send a decision request, letting the model choose whether to call tools.

        Raises:
            ModelServiceError: If the request fails.
        """

    @abstractmethod
    async def complete(self, messages: Sequence[Message]) -> str:
        """Send a final-answer request (no tools offered) and return its text.

        Raises:
            ModelServiceError: If the request fails.
        """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Return True if the service is reachable."""

    async def close(self) -> None:
        """Release client resources."""
        logger.debug(f"{type(self).__name__} closed")
