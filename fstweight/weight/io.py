import struct
from typing import BinaryIO, Callable, Iterable, NamedTuple, Optional, Tuple, TypeVar

T = TypeVar("T")


class WeightParseError(ValueError):
    """
    Raised internally when weight text or binary data is malformed.

    Public readers such as :meth:`Weight.from_string` and :meth:`Weight.read`
    convert it into the weight type's non-member sentinel.
    """


class WeightIOConfig(NamedTuple):
    """
    Delimiters used to write and read composite weights as text.

    Composite weights (products, powers, sparse powers, ...) are written as
    their components joined by ``separator``. When ``open_paren`` and
    ``close_paren`` are set, every composite is enclosed in them, which makes
    arbitrarily nested composites unambiguous. Without delimiters only the last
    component of a composite may itself be a composite, since it consumes the
    rest of the text::

        >>> w = ProductWeight[TropicalWeight, TropicalWeight](1, 2)
        >>> w.to_string(NO_PARENTHESES)
        '1,2'
        >>> w.to_string(PARENTHESES)
        '(1,2)'

    The configuration is a plain immutable value that callers pass explicitly;
    there is no process-wide formatting state.
    """

    open_paren: str = ""
    close_paren: str = ""
    separator: str = ","

    @property
    def has_parens(self) -> bool:
        return bool(self.open_paren)


NO_PARENTHESES = WeightIOConfig()
PARENTHESES = WeightIOConfig("(", ")")


def parentheses(delimiters: str) -> WeightIOConfig:
    """
    Builds a :class:`WeightIOConfig` from a two character delimiter string
    such as ``"()"``, or from ``""`` for no delimiters.

    :param delimiters: Either the empty string or an open and a close character.
    :return: The corresponding configuration.
    """
    if delimiters == "":
        return NO_PARENTHESES
    if len(delimiters) != 2:
        raise ValueError(
            f"Weight parentheses must be empty or two characters, got {delimiters!r}."
        )
    if delimiters[0] == delimiters[1]:
        raise ValueError(f"Open and close parentheses must differ, got {delimiters!r}.")
    if "," in delimiters:
        raise ValueError(f"Parentheses may not contain the separator, got {delimiters!r}.")
    return WeightIOConfig(delimiters[0], delimiters[1])


def write_composite(parts: Iterable[str], config: WeightIOConfig) -> str:
    return config.open_paren + config.separator.join(parts) + config.close_paren


class CompositeWeightReader:
    """
    Splits the text of a composite weight into the text of its components.

    Each call to :meth:`read_element` consumes one component, tracking
    parenthesis depth so that nested composites are passed through whole.
    A component marked ``last`` consumes every remaining separator at the
    current level, which is what lets the final component of an unparenthesized
    composite be a composite itself.
    """

    def __init__(self, text: str, config: WeightIOConfig):
        self._text = text
        self._pos = 0
        self._config = config
        self._depth = 0
        self._c: Optional[str] = None
        self._delimiter: Optional[str] = None

    def _get(self) -> Optional[str]:
        if self._pos >= len(self._text):
            return None
        c = self._text[self._pos]
        self._pos += 1
        return c

    def read_begin(self) -> None:
        c = self._get()
        while c is not None and c.isspace():
            c = self._get()
        if self._config.has_parens:
            if c != self._config.open_paren:
                raise WeightParseError(
                    f"Composite weight {self._text!r} must begin with "
                    f"{self._config.open_paren!r}"
                )
            self._depth += 1
            c = self._get()
        self._c = c

    def read_element(
        self, parse: Callable[[str], T], last: bool = False
    ) -> Tuple[T, bool]:
        """
        Reads and parses one component.

        :param parse: Parser for the component text.
        :param last: Whether this is the final component of the composite.
        :return: The parsed component and whether more text follows it.
        """
        open_paren, close_paren, separator = self._config
        has_parens = self._config.has_parens
        chars = []
        c = self._c
        while (
            c is not None
            and not c.isspace()
            and (c != separator or self._depth > 1 or last)
            and (not has_parens or c != close_paren or self._depth != 1)
        ):
            chars.append(c)
            if has_parens and c == open_paren:
                self._depth += 1
            elif has_parens and c == close_paren:
                if self._depth == 0:
                    raise WeightParseError(
                        f"Unmatched {close_paren!r} in composite weight {self._text!r}"
                    )
                self._depth -= 1
            c = self._get()
        if not chars:
            raise WeightParseError(f"Empty element in composite weight {self._text!r}")
        value = parse("".join(chars))
        # skips the separator or close parenthesis
        self._delimiter = c
        if c is not None and not c.isspace():
            c = self._get()
        self._c = c
        return value, c is not None and not c.isspace()

    def read_end(self) -> None:
        if self._config.has_parens and self._delimiter != self._config.close_paren:
            raise WeightParseError(
                f"Composite weight {self._text!r} must end with "
                f"{self._config.close_paren!r}"
            )
        rest = ("" if self._c is None else self._c) + self._text[self._pos :]
        if rest.strip():
            raise WeightParseError(
                f"Unexpected trailing text {rest!r} in composite weight {self._text!r}"
            )


def write_struct(stream: BinaryIO, fmt: str, *values) -> None:
    stream.write(struct.pack(fmt, *values))


def read_struct(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise WeightParseError(
            f"Unexpected end of stream: wanted {size} bytes, got {len(data)}"
        )
    return struct.unpack(fmt, data)
