"""
Block size value type used by file uploads and file metadata.

A BlockSize is a u32 magnitude in one decimal-SI unit. Conversions between
units use a factor of 1000 and truncate toward zero, so converting down
loses precision: Bytes(1500).to_kilobytes() == Kilobytes(1).

String form is the magnitude followed by a one-letter unit suffix
("1500B", "1K", "4M", "2G", "1T"); this is what the upload endpoint
expects in its block_size field.
"""

from dataclasses import dataclass
from typing import ClassVar

U32_MAX = 2**32 - 1


@dataclass(frozen=True)
class BlockSize:
    """
    Base class for a unit-scaled block size. Use one of the unit subclasses.

    Attributes:
        value: Magnitude in this unit (0 <= value < 2**32)
    """

    value: int

    suffix: ClassVar[str] = ""
    factor: ClassVar[int] = 0

    def __post_init__(self) -> None:
        if type(self) is BlockSize:
            raise TypeError("BlockSize is abstract; use Bytes, Kilobytes, Megabytes, Gigabytes or Terabytes")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"{type(self).__name__} magnitude must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value <= U32_MAX:
            raise ValueError(f"{type(self).__name__} magnitude out of u32 range: {self.value}")

    @property
    def total_bytes(self) -> int:
        return self.value * self.factor

    def _convert(self, unit: type["BlockSize"]) -> "BlockSize":
        return unit(self.total_bytes // unit.factor)

    def to_bytes(self) -> "Bytes":
        return self._convert(Bytes)

    def to_kilobytes(self) -> "Kilobytes":
        return self._convert(Kilobytes)

    def to_megabytes(self) -> "Megabytes":
        return self._convert(Megabytes)

    def to_gigabytes(self) -> "Gigabytes":
        return self._convert(Gigabytes)

    def to_terabytes(self) -> "Terabytes":
        return self._convert(Terabytes)

    def __str__(self) -> str:
        return f"{self.value}{self.suffix}"

    @classmethod
    def parse(cls, text: str) -> "BlockSize":
        """
        Parse the "<magnitude><unit>" form produced by str().

        Raises:
            ValueError: Empty string, unknown unit suffix or bad magnitude
        """
        if not text:
            raise ValueError("Cannot parse empty block size")
        magnitude, suffix = text[:-1], text[-1]
        unit = _UNITS_BY_SUFFIX.get(suffix)
        if unit is None:
            raise ValueError(f"Unknown block size unit {suffix!r} in {text!r}")
        if not magnitude.isdigit():
            raise ValueError(f"Invalid block size magnitude in {text!r}")
        return unit(int(magnitude))

    @staticmethod
    def from_bytes(n: int) -> "BlockSize":
        """Express a byte count in the largest unit it reaches, truncating."""
        if n < 0:
            raise ValueError(f"Byte count must be non-negative, got {n}")
        for unit in (Terabytes, Gigabytes, Megabytes, Kilobytes):
            if n >= unit.factor:
                return unit(n // unit.factor)
        return Bytes(n)


@dataclass(frozen=True)
class Bytes(BlockSize):
    suffix: ClassVar[str] = "B"
    factor: ClassVar[int] = 1


@dataclass(frozen=True)
class Kilobytes(BlockSize):
    suffix: ClassVar[str] = "K"
    factor: ClassVar[int] = 1_000


@dataclass(frozen=True)
class Megabytes(BlockSize):
    suffix: ClassVar[str] = "M"
    factor: ClassVar[int] = 1_000_000


@dataclass(frozen=True)
class Gigabytes(BlockSize):
    suffix: ClassVar[str] = "G"
    factor: ClassVar[int] = 1_000_000_000


@dataclass(frozen=True)
class Terabytes(BlockSize):
    suffix: ClassVar[str] = "T"
    factor: ClassVar[int] = 1_000_000_000_000


_UNITS_BY_SUFFIX: dict[str, type[BlockSize]] = {
    unit.suffix: unit for unit in (Bytes, Kilobytes, Megabytes, Gigabytes, Terabytes)
}


__all__ = [
    "BlockSize",
    "Bytes",
    "Kilobytes",
    "Megabytes",
    "Gigabytes",
    "Terabytes",
]
