"""Repair of the split header found in some exports of the sales dataset.

Some exports break the header line right after ``Gender``, so the
``,Age,...`` remainder lands on the second physical line. The reader here
splices the two lines back together before pandas sees them.
"""

from typing import Iterator, Optional, TextIO


class HeaderRepairState:
    """Per-run record of whether the first line has been seen and repaired."""

    def __init__(self):
        self.first_line_seen = False
        self.repaired = False

    def apply(self, first_line: str, second_line: str) -> str:
        """Return the text of the first two lines, spliced when the header is split.

        Only the first call of a run can repair; later calls pass through.
        """
        if self.first_line_seen:
            return first_line + second_line
        self.first_line_seen = True

        header = first_line.rstrip("\r\n")
        if header.endswith("Gender") and second_line.startswith(",Age"):
            self.repaired = True
            return header + second_line
        return first_line + second_line


class HeaderRepairingReader:
    """File-like wrapper over a text stream that applies HeaderRepairState once.

    Exposes ``read``, ``readline`` and iteration so it can be handed to
    ``pandas.read_csv`` directly.
    """

    def __init__(self, source: TextIO, state: Optional[HeaderRepairState] = None):
        self.source = source
        self.state = state or HeaderRepairState()
        self._pending = ""
        self._primed = False

    def _prime(self) -> None:
        if self._primed:
            return
        self._primed = True
        first_line = self.source.readline()
        second_line = self.source.readline() if first_line else ""
        self._pending = self.state.apply(first_line, second_line)

    def read(self, size: int = -1) -> str:
        self._prime()
        if size is None or size < 0:
            data = self._pending + self.source.read()
            self._pending = ""
            return data

        while len(self._pending) < size:
            chunk = self.source.read(size - len(self._pending))
            if not chunk:
                break
            self._pending += chunk
        data, self._pending = self._pending[:size], self._pending[size:]
        return data

    def readline(self) -> str:
        self._prime()
        if not self._pending:
            return self.source.readline()

        newline = self._pending.find("\n")
        if newline >= 0:
            line, self._pending = self._pending[: newline + 1], self._pending[newline + 1 :]
            return line
        line = self._pending + self.source.readline()
        self._pending = ""
        return line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.readline()
            if not line:
                return
            yield line
