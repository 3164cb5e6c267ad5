from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from photonctl.errors import RequestError

if TYPE_CHECKING:
    from photonctl.client.async_client import AsyncPhotonClient

ModelT = TypeVar("ModelT", bound=BaseModel)


class ServiceBase:
    """A group of REST calls issued through a shared :class:`AsyncPhotonClient`."""

    def __init__(self, client: AsyncPhotonClient) -> None:
        self._client = client

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        """Validate a response body; a malformed payload is a :class:`RequestError`."""

        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RequestError(f"unexpected {model.__name__} payload: {exc}") from exc
