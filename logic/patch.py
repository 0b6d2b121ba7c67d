# Taken with love from Dorkmaster Flek's SMRPG Randomizer

from typing import Dict, Iterable, List
import hashlib
import logging

from .errors import PatchBoundsError
from .room import Door


class Patch:
  """Class representing a patch for a specific seed that can be added to as we build it."""

  def __init__(self) -> None:
    self._data: Dict[int, bytes] = {}
    self._descriptions: Dict[int, str] = {}

  @classmethod
  def FromDoors(cls, doors: Iterable[Door]) -> "Patch":
    """Build the patch that rewires the ROM to a list of resolved doors.

    Each door writes its destination's location bytes to both ROM addresses
    recorded for its exit.
    """
    patch = cls()
    for door in doors:
      destination, exit = door
      for addr in exit.addresses:
        patch.AddData(addr, destination.destination_bytes,
                      description=f"exit {exit.id} -> destination {destination.id}")
    return patch

  def __add__(self, other):
    """Add another patch to this patch and return a new Patch object."""
    if not isinstance(other, Patch):
      raise TypeError("Other object is not Patch type")

    patch = Patch()
    patch += self
    patch += other
    return patch

  def __iadd__(self, other):
    """Add another patch to this patch in place."""
    if not isinstance(other, Patch):
      raise TypeError("Other object is not Patch type")

    for addr in other.GetAddresses():
      self.AddData(addr, other.GetData(addr), description=other.GetDescription(addr))

    return self

  def __len__(self) -> int:
    return len(self._data)

  def GetAddresses(self) -> List[int]:
    """Returns a List of all addresses in the patch, in the order they were added."""
    return list(self._data.keys())

  def GetData(self, addr: int) -> List[int]:
    """Get data in the patch for this address.

    :param addr: Address for the start of the data.
    :type addr: int
    :rtype: list[int]
    """
    return list(self._data[addr])

  def GetDescription(self, addr: int) -> str | None:
    """Get the description for this address, or None if it has none."""
    return self._descriptions.get(addr, None)

  def AddData(self, addr: int, data: bytes | List[int], description: str | None = None) -> None:
    """Add data to the patch.

    :param addr: Address for the start of the data.
    :type addr: int
    :param data: Patch data as raw bytes.
    :type data: bytes|list[int]
    :param description: Optional human-readable description of this patch.
    :type description: str|None
    """
    if addr < 0:
      raise PatchBoundsError(f"Negative patch address: {addr}")
    new_data = bytes(data)
    if addr in self._data and self._data[addr] != new_data:
      logging.warning(
          f"Overwriting patch data at address 0x{addr:06X} "
          f"({self._descriptions.get(addr)} replaced by {description})")
    self._data[addr] = new_data
    if description is not None:
      self._descriptions[addr] = description

  def Apply(self, rom_data: bytearray, logger=None) -> None:
    """Apply this patch to ROM data in place.

    Every write is checked against the size of the ROM before anything is
    changed, so a patch that doesn't fit leaves rom_data untouched.

    :param rom_data: The ROM data to patch (modified in-place)
    :type rom_data: bytearray
    :param logger: Optional logger (defaults to logging module)
    :type logger: logging.Logger|None
    :raises PatchBoundsError: If any write would go past the end of rom_data
    """
    log = logger or logging

    for address in self.GetAddresses():
      end = address + len(self._data[address])
      if end > len(rom_data):
        description = self.GetDescription(address)
        desc_str = f" ({description})" if description else ""
        raise PatchBoundsError(
            f"Patch at address 0x{address:06X}{desc_str} ends at 0x{end:06X}, "
            f"past the end of the 0x{len(rom_data):06X} byte ROM")

    for address in self.GetAddresses():
      patch_data = self._data[address]
      rom_data[address:address + len(patch_data)] = patch_data
    log.debug(f"Applied {len(self)} patch writes")

  def GetHashCode(self) -> str:
    """Short hash of the patch contents, for telling two shuffles apart."""
    hash_string = hashlib.sha224()
    # Sort addresses to ensure deterministic hash generation
    for address in sorted(self._data.keys()):
      hash_string.update(str(address).encode('utf-8'))
      hash_string.update(self._data[address])
    return hash_string.hexdigest()[0:8].upper()
