from dataclasses import dataclass, field
from typing import Optional, Tuple

from .randomizer_constants import Address, DoorId, ExitType, RoomId


@dataclass(frozen=True)
class Destination():
  """A place a door can lead to.

  Identity is the door id alone. The location bytes are what gets written
  into the ROM and don't take part in equality or hashing.
  """
  id: DoorId
  destination_bytes: bytes = field(compare=False)

  def __repr__(self) -> str:
    return f"Destination({self.id}, {self.destination_bytes.hex(' ').upper()})"


@dataclass(frozen=True)
class Exit():
  """The outgoing side of a physical doorway.

  A door record always carries two ROM addresses. Both get the destination
  bytes written to them, for one-way and two-way doors alike.
  """
  id: DoorId
  exit_addr1: Address = field(compare=False)
  exit_addr2: Address = field(compare=False)
  exit_type: ExitType = field(compare=False)
  # Only meaningful for two-way doors
  linked_door_id: Optional[DoorId] = field(default=None, compare=False)

  @property
  def addresses(self) -> Tuple[Address, Address]:
    return (self.exit_addr1, self.exit_addr2)

  def IsOneWay(self) -> bool:
    return self.exit_type == ExitType.ONE_WAY

  def IsTwoWay(self) -> bool:
    return self.exit_type == ExitType.TWO_WAY

  def __repr__(self) -> str:
    return f"Exit({self.id}, {self.exit_type}, 0x{self.exit_addr1:X}/0x{self.exit_addr2:X})"


@dataclass(frozen=True)
class Room():
  id: RoomId
  one_way_entrances: Tuple[Destination, ...] = field(default=(), compare=False)
  two_way_entrances: Tuple[Destination, ...] = field(default=(), compare=False)
  one_way_exits: Tuple[Exit, ...] = field(default=(), compare=False)
  two_way_exits: Tuple[Exit, ...] = field(default=(), compare=False)

  def __post_init__(self) -> None:
    # Rooms never change once loaded, so freeze any lists handed to us.
    for name in ('one_way_entrances', 'two_way_entrances', 'one_way_exits', 'two_way_exits'):
      object.__setattr__(self, name, tuple(getattr(self, name)))

  @property
  def exits(self) -> Tuple[Exit, ...]:
    """One-way exits followed by two-way exits."""
    return self.one_way_exits + self.two_way_exits

  @property
  def entrances(self) -> Tuple[Destination, ...]:
    return self.one_way_entrances + self.two_way_entrances

  def HasOneWayEntrance(self) -> bool:
    return len(self.one_way_entrances) > 0

  def HasTwoWayEntrance(self) -> bool:
    return len(self.two_way_entrances) > 0

  def HasEntrances(self) -> bool:
    return self.HasOneWayEntrance() or self.HasTwoWayEntrance()

  def GetEntrances(self, exit_type: ExitType) -> Tuple[Destination, ...]:
    if exit_type == ExitType.ONE_WAY:
      return self.one_way_entrances
    return self.two_way_entrances


@dataclass(frozen=True)
class Door():
  """A resolved connection: going through `exit` puts you at `destination`."""
  destination: Destination
  exit: Exit

  def __iter__(self):
    return iter((self.destination, self.exit))

  def __repr__(self) -> str:
    return f"Door({self.destination.id} <- {self.exit.id})"
