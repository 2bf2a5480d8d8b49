"""
Errors raised by table management.

None of these is fatal: handlers translate them into a protocol reply
(TABLE_FULL, TABLE_NOT_FOUND) or log and drop the offending message.
Timeouts and disconnects are not errors at all; the turn coordinator
resolves them to a default action.
"""


class TableError(Exception):
    """Base class for table errors."""
    pass


class ProtocolError(TableError):
    """A message that makes no sense in the sender's current state."""
    pass


class TableNotFoundError(TableError):
    """JOIN with a code that matches no live table."""

    def __init__(self, code: str):
        super().__init__(f"Table {code!r} not found")
        self.code = code


class TableFullError(TableError):
    """JOIN on a table already at capacity."""

    def __init__(self, code: str, capacity: int):
        super().__init__(f"Table {code} is full ({capacity} players)")
        self.code = code
        self.capacity = capacity
