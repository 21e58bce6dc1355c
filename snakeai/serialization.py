"""
Plain text (de)serialization helpers for the save-state format.

The save file is a sequence of whitespace/newline separated numbers.
Several components read consecutive fields from the same stream, so
reading goes through a shared ``TokenReader`` that buffers tokens line
by line.
"""
from typing import Iterable, List, TextIO, Union


class TokenReader:
    """
    Sequential reader of whitespace-delimited numeric fields.

    Example:
        with open(path) as f:
            reader = TokenReader(f)
            input_size = reader.read_int('input_size')
            rate = reader.read_float('mutation_rate')
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._pending: List[str] = []

    def _next_token(self, field: str) -> str:
        while not self._pending:
            line = self.stream.readline()
            if not line:
                raise ValueError(f"Unexpected end of data while reading '{field}'")
            self._pending = line.split()[::-1]
        return self._pending.pop()

    def read_int(self, field: str) -> int:
        token = self._next_token(field)
        try:
            return int(token)
        except ValueError:
            raise ValueError(f"Field '{field}' must be an integer, got {token!r}") from None

    def read_float(self, field: str) -> float:
        token = self._next_token(field)
        try:
            return float(token)
        except ValueError:
            raise ValueError(f"Field '{field}' must be a number, got {token!r}") from None

    def read_floats(self, count: int, field: str) -> List[float]:
        return [self.read_float(f'{field}[{i}]') for i in range(count)]


def as_reader(stream: Union[TextIO, TokenReader]) -> TokenReader:
    """Wrap a text stream in a TokenReader unless it already is one."""
    if isinstance(stream, TokenReader):
        return stream
    return TokenReader(stream)


def format_float(value: float) -> str:
    # repr round-trips float64 exactly
    return repr(float(value))


def format_floats(values: Iterable[float]) -> str:
    return ' '.join(format_float(v) for v in values)
