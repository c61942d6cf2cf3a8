"""Abstract image stores and the parameters used to build them."""

from __future__ import annotations

import abc
import dataclasses
import io
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional


class _DiscardWriter(io.TextIOBase):
    """A writable text stream that drops everything written to it."""

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        return len(text)


DISCARD = _DiscardWriter()


class Store(abc.ABC):
    """An abstract image store."""

    @abc.abstractmethod
    def add(self, image: str) -> str:
        """Copy the named image into the store and return its content digest."""

    @abc.abstractmethod
    def push(self, digest: Any, src: Any, dst: Any) -> None:
        """Copy the image with ``digest`` stored under ``src`` to repository ``dst``."""


@dataclass(frozen=True)
class Parameters:
    """Parameters used to create image stores."""

    archive_dir: str = ""
    logs: Any = field(default=DISCARD)
    # HTTP transport to use when talking to an OCI registry.
    transport: Any = None


Option = Callable[[Parameters], Parameters]
Constructor = Callable[..., Store]


def create(*args: Option) -> Parameters:
    """Build parameters by applying each option in turn to the defaults."""
    params = Parameters()
    for option in args:
        params = option(params)
    return params


def with_archive_dir(archive_dir: str) -> Option:
    """Return an option that sets the archive directory."""

    def apply(params: Parameters) -> Parameters:
        return dataclasses.replace(params, archive_dir=archive_dir)

    return apply


def with_logs(logs: Any) -> Option:
    """Return an option that sets the log writer."""

    def apply(params: Parameters) -> Parameters:
        return dataclasses.replace(params, logs=logs)

    return apply


def with_transport(transport: Any) -> Option:
    """Return an option that sets the registry transport."""

    def apply(params: Parameters) -> Parameters:
        return dataclasses.replace(params, transport=transport)

    return apply


@dataclass
class MockStore(Store):
    """A store whose behaviour is supplied by stub callables."""

    add_stub: Optional[Callable[[str], str]] = None
    push_stub: Optional[Callable[[Any, Any, Any], None]] = None

    def add(self, image: str) -> str:
        if self.add_stub is None:
            raise RuntimeError("no add stub configured")
        return self.add_stub(image)

    def push(self, digest: Any, src: Any, dst: Any) -> None:
        if self.push_stub is None:
            raise RuntimeError("no push stub configured")
        return self.push_stub(digest, src, dst)