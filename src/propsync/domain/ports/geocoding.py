"""Port for resolving street addresses to coordinates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from propsync.domain.model import Coordinates


@runtime_checkable
class Geocoder(Protocol):
    """Callable port; returns ``None`` when the address cannot be resolved."""

    def __call__(
        self,
        *,
        address: str,
        city: str,
        state: str,
        zip_code: str | None = None,
    ) -> Coordinates | None: ...


__all__ = ["Geocoder"]
