from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class RemoteExecPort(ABC):
    """Run a command on the device and hand back its stdout bytes.

    Implementations raise ``domain.errors.RemoteCommandError`` when the
    transport fails. A non-zero remote exit status is *not* an error here;
    callers judge the bytes they get back.
    """

    @abstractmethod
    def execute(self, command: str, args: Sequence[str] = ()) -> bytes: ...

    def close(self) -> None:  # noqa: B027 - optional hook
        pass
