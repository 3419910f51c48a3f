from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class LinkError(Exception):
    pass


class DeviceNotFoundError(LinkError):
    pass


class NotACharacterDeviceError(LinkError):
    pass


class DeviceBusyError(LinkError):
    pass


class NotATerminalError(LinkError):
    pass


class LinkConfigError(LinkError):
    pass


class LinkClosedError(LinkError):
    pass


class LinkWriteError(LinkError):
    pass


class LinkReadError(LinkError):
    pass


class SerialLink(ABC):
    """Byte link to an SLCAN adapter.

    Concrete links can be:
    - a real serial device (pyserial)
    - an in-memory simulated adapter
    - a recording wrapper around another link

    The link is a context manager; leaving the block always closes it.
    """

    name: str = ""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def open(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, max_bytes: int) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def write(self, data: bytes) -> int:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> SerialLink:
        if not self.is_open:
            self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
