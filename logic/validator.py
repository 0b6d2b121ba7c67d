from collections import Counter, deque
from typing import Dict, List, Sequence, Set
import logging as log

from .connectivity_index import ConnectivityIndex
from .errors import ConnectivityLookupError, ShuffleValidationError
from .randomizer_constants import DoorId, RoomId
from .room import Door, Room


class Validator(object):
  """Checks that a finished door shuffle is a complete, traversable map.

  The shuffler is built so that these checks always pass. Running them on the
  actual output before anything is written to the ROM catches bad input data
  and regressions instead of producing an unbeatable seed.
  """

  def __init__(self, first_room: Room, rooms: Sequence[Room], doors: Sequence[Door],
               connectivity_index: ConnectivityIndex) -> None:
    self.first_room = first_room
    self.rooms = [room for room in rooms if room != first_room]
    self.doors = list(doors)
    self.connectivity_index = connectivity_index
    self.problems: List[str] = []

  def _AllRooms(self) -> List[Room]:
    return [self.first_room] + self.rooms

  def _CheckCompleteness(self) -> None:
    """Every exit and every entrance must be used by exactly one door."""
    exit_counts = Counter(door.exit.id for door in self.doors)
    destination_counts = Counter(door.destination.id for door in self.doors)

    for room in self._AllRooms():
      for exit in room.exits:
        if exit_counts[exit.id] != 1:
          self.problems.append(
              f"Exit {exit.id} in room {room.id} is used by {exit_counts[exit.id]} doors")
      # The starting room's entrances are never shuffled
      if room == self.first_room:
        continue
      for entrance in room.entrances:
        if destination_counts[entrance.id] != 1:
          self.problems.append(
              f"Entrance {entrance.id} of room {room.id} is used by {destination_counts[entrance.id]} doors")

  def _CheckTypes(self) -> None:
    """One-way entrances only get one-way exits, and two-way only two-way."""
    one_way_entrance_ids: Set[DoorId] = set()
    two_way_entrance_ids: Set[DoorId] = set()
    for room in self.rooms:
      one_way_entrance_ids.update(entrance.id for entrance in room.one_way_entrances)
      two_way_entrance_ids.update(entrance.id for entrance in room.two_way_entrances)

    for door in self.doors:
      if door.destination.id in one_way_entrance_ids and not door.exit.IsOneWay():
        self.problems.append(f"One-way entrance {door.destination.id} is paired with two-way exit {door.exit.id}")
      if door.destination.id in two_way_entrance_ids and not door.exit.IsTwoWay():
        self.problems.append(f"Two-way entrance {door.destination.id} is paired with one-way exit {door.exit.id}")

  def _CheckReciprocity(self) -> None:
    """Going back through a two-way door must lead to where you came from."""
    door_by_exit: Dict[DoorId, Door] = {door.exit.id: door for door in self.doors}
    for door in self.doors:
      if not door.exit.IsTwoWay():
        continue
      try:
        way_back = self.connectivity_index.FindCorrespondingExit(door.destination)
        expected_destination = self.connectivity_index.FindCorrespondingDestination(door.exit)
      except ConnectivityLookupError as e:
        self.problems.append(str(e))
        continue
      back_door = door_by_exit.get(way_back.id)
      if back_door is None or back_door.destination != expected_destination:
        self.problems.append(
            f"Two-way door {door.exit.id} -> {door.destination.id} has no matching way back")

  def GetUnreachableRooms(self) -> List[RoomId]:
    """Room ids that can't be reached from the starting room by following doors."""
    room_by_exit: Dict[DoorId, RoomId] = {}
    room_by_entrance: Dict[DoorId, RoomId] = {}
    for room in self._AllRooms():
      for exit in room.exits:
        room_by_exit[exit.id] = room.id
      for entrance in room.entrances:
        room_by_entrance[entrance.id] = room.id

    neighbors: Dict[RoomId, Set[RoomId]] = {room.id: set() for room in self._AllRooms()}
    for door in self.doors:
      source = room_by_exit.get(door.exit.id)
      target = room_by_entrance.get(door.destination.id)
      if source is not None and target is not None:
        neighbors[source].add(target)

    visited = {self.first_room.id}
    queue = deque([self.first_room.id])
    while queue:
      room_id = queue.popleft()
      for next_room_id in sorted(neighbors[room_id]):
        if next_room_id not in visited:
          visited.add(next_room_id)
          queue.append(next_room_id)

    return [room.id for room in self.rooms if room.id not in visited]

  def _CheckReachability(self) -> None:
    for room_id in self.GetUnreachableRooms():
      self.problems.append(f"Room {room_id} can't be reached from room {self.first_room.id}")

  def IsShuffleValid(self) -> bool:
    self.problems = []
    self._CheckCompleteness()
    self._CheckTypes()
    self._CheckReciprocity()
    self._CheckReachability()
    for problem in self.problems:
      log.warning(problem)
    if not self.problems:
      log.info(f"Shuffle of {len(self.rooms)} rooms and {len(self.doors)} doors is valid")
    return not self.problems

  def Validate(self) -> None:
    """Like IsShuffleValid but raises on the first failing shuffle.

    Raises:
      ShuffleValidationError: If any check fails
    """
    if not self.IsShuffleValid():
      raise ShuffleValidationError(
          f"Shuffle failed validation with {len(self.problems)} problem(s): {self.problems[0]}")
