"""Result of one raw command sent through a Connection."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Command:
    """
    Snapshot of a raw command's outcome.

    A rejected command with no explicit ``error`` takes the connection's
    last transport error as its error text.
    """
    connection: object = field(repr=False, compare=False)
    output: Optional[str]
    is_error: bool
    error: Optional[str] = None

    def __post_init__(self):
        if self.is_error and self.error is None:
            object.__setattr__(self, "error", getattr(self.connection, "last_error", None))

    @property
    def code(self) -> Optional[int]:
        """Reply code of the last output line, if there is one."""
        if not self.output:
            return None
        last = self.output.rsplit("\n", 1)[-1]
        if last[:3].isdigit():
            return int(last[:3])
        return None
