"""
HTTP header collection for http_txn.

Header field-names are validated against the RFC 7230 token grammar,
looked up case-insensitively and rendered in canonical form
(``content-type`` -> ``Content-Type``). Each name holds an ordered
list of values.
"""

import re
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from .exceptions import InvalidHeaderName, InvalidHeaderValue


HeaderValue = Union[str, int, float, bytes, Iterable[Any]]
HeadersInit = Union["Headers", Mapping[str, HeaderValue], Iterable[Tuple[str, Any]]]

# RFC 7230 section 3.2.6 token
TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def canonical_name(name: str) -> str:
    """Capitalize each hyphen-separated segment of a header name."""
    return "-".join(part[:1].upper() + part[1:] for part in name.lower().split("-"))


def is_valid_name(name: object) -> bool:
    """Check whether ``name`` is a valid header field-name."""
    return isinstance(name, str) and TOKEN_RE.fullmatch(name) is not None


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if isinstance(value, (int, float)):
        return str(value)
    if value is None or isinstance(value, (list, tuple, dict, set, frozenset)):
        raise InvalidHeaderValue(value)
    if type(value).__str__ is object.__str__:
        raise InvalidHeaderValue(value)
    return str(value)


class Headers:
    """
    Case-insensitive, multi-value HTTP header collection.

    Values are stored in insertion order per name, names in order of
    first insertion. Array-style access returns the comma-joined line.
    """

    def __init__(self, headers: Optional[HeadersInit] = None) -> None:
        """
        Initialize the collection, optionally seeded with headers.

        Args:
            headers: Another Headers instance (copied), a mapping of
                     name to value(s), or an iterable of (name, value)
                     pairs where repeated names append.
        """
        self._values: Dict[str, List[str]] = {}
        self._names: Dict[str, str] = {}

        if headers is None:
            return

        if isinstance(headers, Headers):
            for key, values in headers._values.items():
                self._values[key] = list(values)
                self._names[key] = headers._names[key]
        elif isinstance(headers, Mapping):
            for name, value in headers.items():
                self.set(name, value)
        else:
            for name, value in headers:
                self.add(name, value)

    @staticmethod
    def _validate(name: str) -> str:
        if not is_valid_name(name):
            raise InvalidHeaderName(name)
        return name.lower()

    @staticmethod
    def _normalize_values(value: HeaderValue) -> List[str]:
        values = value if isinstance(value, (list, tuple)) else [value]
        # Trim OWS around each field-value
        return [_stringify(v).strip() for v in values]

    def set(self, name: str, value: HeaderValue) -> "Headers":
        """Replace all values of a header."""
        key = self._validate(name)
        values = self._normalize_values(value)
        self._names[key] = canonical_name(name)
        self._values[key] = values
        return self

    def add(self, name: str, value: HeaderValue) -> "Headers":
        """Append one or more values to a header, creating it if needed."""
        key = self._validate(name)
        if key not in self._values:
            return self.set(name, value)
        self._values[key].extend(self._normalize_values(value))
        return self

    def has(self, name: str) -> bool:
        """Whether a header exists (case-insensitive)."""
        return isinstance(name, str) and name.lower() in self._values

    def get(self, name: str) -> List[str]:
        """Return all values for a header, or an empty list."""
        if not isinstance(name, str):
            return []
        return list(self._values.get(name.lower(), []))

    def get_line(self, name: str) -> str:
        """Return all values for a header joined by ", "."""
        return ", ".join(self.get(name))

    def remove(self, name: str) -> "Headers":
        """Remove a header. Missing headers are ignored."""
        if not isinstance(name, str):
            return self
        key = name.lower()
        self._values.pop(key, None)
        self._names.pop(key, None)
        return self

    def all(self) -> Dict[str, List[str]]:
        """Return canonical-name -> values, in first-insertion order."""
        return {self._names[key]: list(values) for key, values in self._values.items()}

    def flatten(self) -> Dict[str, str]:
        """Return canonical-name -> comma-joined line."""
        return {self._names[key]: ", ".join(values) for key, values in self._values.items()}

    def lines(self) -> List[Tuple[str, str]]:
        """Return one (canonical-name, value) pair per stored value."""
        return [
            (self._names[key], value)
            for key, values in self._values.items()
            for value in values
        ]

    def copy(self) -> "Headers":
        return Headers(self)

    def __getitem__(self, name: str) -> str:
        if not self.has(name):
            raise KeyError(name)
        return self.get_line(name)

    def __setitem__(self, name: str, value: HeaderValue) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        if not self.has(name):
            raise KeyError(name)
        self.remove(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter([self._names[key] for key in self._values])

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        # Same field value per name, as combined on the wire (RFC 7230 3.2.2)
        return self._combined() == other._combined()

    def _combined(self) -> Dict[str, str]:
        return {key: ", ".join(values) for key, values in self._values.items()}

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "\r\n".join(f"{name}: {line}" for name, line in self.flatten().items())

    def __repr__(self) -> str:
        return f"Headers({self.all()!r})"
