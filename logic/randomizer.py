import io
import logging as log
from typing import List, Optional, Sequence

from rng.random_number_generator import RandomNumberGenerator
from rom.door_data import DoorTable
from rom.rom_config import DEFAULT_STARTING_ROOM, StartingRoomConfig
from rom.rom_image import RomImage
from .connectivity_index import ConnectivityIndex
from .errors import ReferentialError
from .patch import Patch
from .room import Door, Room
from .room_shuffler import RoomShuffler
from .validator import Validator


class KatamRandomizer():
  """Shuffles the door layout of a Kirby & The Amazing Mirror ROM.

  One instance does one shuffle for one seed. The doors are computed once on
  first use and cached, so GetDoors, GetPatch and GetSpoilerLines all describe
  the same result.
  """

  def __init__(self, rom_bytes: io.BytesIO, seed: int, door_table: DoorTable, rooms: Sequence[Room],
               starting_room: StartingRoomConfig = DEFAULT_STARTING_ROOM) -> None:
    self.rom_bytes = rom_bytes
    self.seed = seed
    self.door_table = door_table
    self.rooms = list(rooms)
    self.starting_room = starting_room
    self._doors: Optional[List[Door]] = None

  def _CheckStartingExit(self) -> None:
    """The starting exit is not a door table record, so its id must not be one either.

    Raises:
      ReferentialError: If a door record or a room already uses the starting exit's id
    """
    exit_id = self.starting_room.exit_id
    if exit_id in self.door_table:
      raise ReferentialError(f"Starting exit id {exit_id} is also a door in the door table")
    for room in self.rooms:
      if room.id == self.starting_room.room_id:
        continue
      door_ids = {door.id for door in room.exits + room.entrances}
      if exit_id in door_ids:
        raise ReferentialError(f"Starting exit id {exit_id} is also used by a door of room {room.id}")

  def GetDoors(self) -> List[Door]:
    if self._doors is not None:
      return self._doors

    self._CheckStartingExit()
    first_room = self.starting_room.BuildRoom()
    connectivity_index = ConnectivityIndex.FromDoorTable(self.door_table)
    rng = RandomNumberGenerator(self.seed)
    log.info(f"Shuffling {len(self.rooms)} rooms with seed {self.seed}")

    shuffler = RoomShuffler(connectivity_index, rng)
    doors = shuffler.ShuffleRooms(first_room, self.rooms)

    Validator(first_room, self.rooms, doors, connectivity_index).Validate()
    self._doors = doors
    return doors

  def GetPatch(self) -> Patch:
    return Patch.FromDoors(self.GetDoors())

  def GetPatchedRom(self) -> RomImage:
    """Apply the shuffle to a copy of the input ROM.

    Raises:
      PatchBoundsError: If an exit address lies outside the ROM
    """
    self.rom_bytes.seek(0)
    rom_image = RomImage.FromBytes(self.rom_bytes.read())
    rom_image.ApplyPatch(self.GetPatch())
    return rom_image

  def GetSpoilerLines(self) -> List[str]:
    """Human-readable listing of every door: the exit's addresses and the bytes written there."""
    lines = [f"Seed: {self.seed}", f"Doors: {len(self.GetDoors())}", ""]
    for door in self.GetDoors():
      destination, exit = door
      lines.append(f"{exit.exit_addr1:x} | {exit.exit_addr2:x}")
      lines.append(", ".join(f"{byte:x}" for byte in destination.destination_bytes))
      lines.append("")
    return lines
