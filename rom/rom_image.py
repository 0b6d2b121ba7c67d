"""In-memory ROM image.

The whole ROM is read into a bytearray, patched in memory and written out as
a new file. The source file is never modified.
"""

import logging as log
from pathlib import Path
from typing import Iterable, List, Union

from logic.errors import PatchBoundsError
from logic.patch import Patch


class RomImage:
    """A ROM file loaded into memory."""

    def __init__(self, data: Union[bytes, bytearray]) -> None:
        self._buffer = bytearray(data)

    @classmethod
    def FromFile(cls, path: Union[str, Path]) -> "RomImage":
        """Load a ROM image from disk.

        Raises:
            FileNotFoundError: If the ROM file doesn't exist
        """
        try:
            data = Path(path).read_bytes()
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Input ROM not found: {path}") from exc
        log.info(f"Loaded {len(data):#x} byte ROM from {path}")
        return cls(data)

    @classmethod
    def FromBytes(cls, data: Union[bytes, bytearray]) -> "RomImage":
        return cls(data)

    def __len__(self) -> int:
        return len(self._buffer)

    def _CheckBounds(self, address: int, num_bytes: int) -> None:
        if address < 0 or address + num_bytes > len(self._buffer):
            raise PatchBoundsError(
                f"Access of {num_bytes} byte(s) at 0x{address:06X} is outside "
                f"the 0x{len(self._buffer):06X} byte ROM")

    def ReadBytes(self, address: int, num_bytes: int = 1) -> List[int]:
        assert num_bytes > 0, "num_bytes shouldn't be negative"
        self._CheckBounds(address, num_bytes)
        return list(self._buffer[address:address + num_bytes])

    def WriteByte(self, byte: int, address: int) -> None:
        self._CheckBounds(address, 1)
        self._buffer[address] = byte

    def WriteBytes(self, data: Iterable[int], address: int) -> None:
        data = bytes(data)
        self._CheckBounds(address, len(data))
        self._buffer[address:address + len(data)] = data

    def ApplyPatch(self, patch: Patch) -> None:
        patch.Apply(self._buffer)

    def GetBytes(self) -> bytes:
        return bytes(self._buffer)

    def Save(self, path: Union[str, Path]) -> Path:
        """Write the (patched) ROM to a new file, creating parent directories."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(bytes(self._buffer))
        log.info(f"Wrote {len(self._buffer):#x} byte ROM to {output_path}")
        return output_path
