"""Room connection shuffler.

Builds a new door layout by growing a connected map one room at a time:

1. Start from the starting room's exits (the "exit pool").
2. Pick a random room that can be attached to one of the pool's exits
   without leaving some other room impossible to attach later.
3. Connect it, either through a one-way door or through a two-way door.
   Two-way connections also wire up the way back, reusing the vanilla
   geometry of the doors involved.
4. Add the new room's exits to the pool and repeat until every room is
   connected.
5. Finally pair the remaining exits in the pool with the one-way entrances
   that were never used to attach a room.

Every room is attached through an exit of an already connected room, so
every room can be reached from the starting room.
"""

import logging as log
from typing import Iterable, List, NamedTuple, Sequence

from rng.random_number_generator import RandomNumberGenerator
from .connectivity_index import ConnectivityIndex
from .errors import MatchingCountError, TopologicalDeadlockError
from .randomizer_constants import ExitType
from .room import Destination, Door, Exit, Room


class PoolComposition(NamedTuple):
    """How many exits of each type are waiting in the exit pool."""
    one_way: int
    two_way: int

    @classmethod
    def FromExits(cls, exits: Iterable[Exit]) -> "PoolComposition":
        one_way = 0
        two_way = 0
        for exit in exits:
            if exit.IsOneWay():
                one_way += 1
            else:
                two_way += 1
        return cls(one_way, two_way)

    def Has(self, exit_type: ExitType) -> bool:
        if exit_type == ExitType.ONE_WAY:
            return self.one_way > 0
        return self.two_way > 0

    def IsEmpty(self) -> bool:
        return self.one_way == 0 and self.two_way == 0


def _decrement(count: int) -> int:
    return count - 1 if count > 0 else 0


# ============================================================================
# Selectability predicates
#
# These only look at entrance/exit counts, never at the RNG, so they can be
# tested on their own.
# ============================================================================

def room_has_matching_entrance(room: Room, composition: PoolComposition) -> bool:
    """True if the room has an entrance of a type currently in the pool."""
    return ((room.HasOneWayEntrance() and composition.one_way > 0) or
            (room.HasTwoWayEntrance() and composition.two_way > 0))


def count_new_exits(room: Room, composition: PoolComposition) -> PoolComposition:
    """Pessimistic pool composition after connecting `room`.

    An exit of every entrance type the room has is assumed to be consumed.
    Unless the room can be entered one-way, one of its own two-way exits is
    assumed to be used up as the way back out of the consumed entrance.
    """
    if not room.HasEntrances():
        raise TopologicalDeadlockError(f"Room {room.id} has no entrances")

    if room.HasOneWayEntrance():
        room_two_way_exits = len(room.two_way_exits)
    else:
        room_two_way_exits = _decrement(len(room.two_way_exits))

    one_way = composition.one_way
    two_way = composition.two_way
    if room.HasOneWayEntrance():
        one_way = _decrement(one_way)
    if room.HasTwoWayEntrance():
        two_way = _decrement(two_way)

    return PoolComposition(one_way + len(room.one_way_exits), two_way + room_two_way_exits)


def _has_one_way_to_two_way_room(rooms: Iterable[Room]) -> bool:
    """A room entered one-way that opens up two-way exits."""
    return any(room.HasOneWayEntrance() and room.two_way_exits for room in rooms)


def _has_two_way_to_one_way_room(rooms: Iterable[Room]) -> bool:
    """A room entered two-way that opens up one-way exits."""
    return any(room.HasTwoWayEntrance() and room.one_way_exits for room in rooms)


def room_does_not_block_full_access(room: Room, composition: PoolComposition,
                                    unselected_rooms: Sequence[Room]) -> bool:
    """True if connecting `room` still leaves every other room attachable.

    Another room counts as attachable if the new pool holds an exit type it
    can be entered through, or if some other remaining room could later
    convert the pool into that type.
    """
    other_rooms = [other for other in unselected_rooms if other != room]
    new_composition = count_new_exits(room, composition)
    if not other_rooms:
        return True
    if new_composition.IsEmpty():
        return False

    one_to_two_exists = _has_one_way_to_two_way_room(other_rooms)
    two_to_one_exists = _has_two_way_to_one_way_room(other_rooms)

    for other in other_rooms:
        if not other.HasEntrances():
            raise TopologicalDeadlockError(f"Room {other.id} has no entrances")
        reachable_one_way = other.HasOneWayEntrance() and (
            new_composition.one_way > 0 or two_to_one_exists)
        reachable_two_way = other.HasTwoWayEntrance() and (
            new_composition.two_way > 0 or one_to_two_exists)
        if not (reachable_one_way or reachable_two_way):
            return False
    return True


def is_room_selectable(room: Room, composition: PoolComposition,
                       unselected_rooms: Sequence[Room]) -> bool:
    return (room_has_matching_entrance(room, composition) and
            room_does_not_block_full_access(room, composition, unselected_rooms))


class RoomConnection(NamedTuple):
    """Result of attaching one room to the exit pool."""
    room: Room
    exit_type: ExitType
    used_exit: Exit
    doors: List[Door]
    new_exits: List[Exit]
    leftover_one_way_entrances: List[Destination]


class RoomShuffler:
    """Shuffles room connections into a fully connected door layout."""

    def __init__(self, connectivity_index: ConnectivityIndex, rng: RandomNumberGenerator) -> None:
        """Initialize the RoomShuffler.

        Args:
            connectivity_index: Original door layout, used to pair up two-way doors
            rng: Random number generator for every choice made while shuffling
        """
        self.connectivity_index = connectivity_index
        self.rng = rng

    def ShuffleRooms(self, first_room: Room, all_rooms: Sequence[Room]) -> List[Door]:
        """Connect every room to the map that grows out of `first_room`.

        Args:
            first_room: Room the player starts in. Only its exits are used.
            all_rooms: Every room to connect. `first_room` may be included
                and is skipped if so.

        Returns:
            The resolved doors, in the order they were made.

        Raises:
            TopologicalDeadlockError: If at some point no room can be attached.
            MatchingCountError: If the leftover entrances and exits can't be paired.
        """
        unselected_rooms: List[Room] = [room for room in all_rooms if room != first_room]
        exits: List[Exit] = list(first_room.exits)
        leftover_one_way_entrances: List[Destination] = []
        doors: List[Door] = []

        for room in unselected_rooms:
            if not room.HasEntrances():
                raise TopologicalDeadlockError(f"Room {room.id} has no entrances and can never be connected")

        log.debug(f"Shuffling {len(unselected_rooms)} rooms starting from room {first_room.id}")

        while unselected_rooms:
            connection = self._ConnectNewRoom(exits, unselected_rooms)
            exits = self._CalculateNewExits(exits, connection.used_exit, connection.new_exits)
            unselected_rooms = [room for room in unselected_rooms if room != connection.room]
            doors.extend(connection.doors)
            leftover_one_way_entrances.extend(connection.leftover_one_way_entrances)

            log.debug(f"Connected room {connection.room.id} ({connection.exit_type}): {connection.doors}; "
                      f"{len(exits)} exits open, {len(unselected_rooms)} rooms left")

        doors.extend(self._ResolveLeftovers(exits, leftover_one_way_entrances))
        log.info(f"Shuffled rooms into {len(doors)} doors")
        return doors

    def _ConnectNewRoom(self, exits: List[Exit], unselected_rooms: List[Room]) -> RoomConnection:
        composition = PoolComposition.FromExits(exits)
        selectable_rooms = [
            room for room in unselected_rooms
            if is_room_selectable(room, composition, unselected_rooms)
        ]
        if not selectable_rooms:
            raise TopologicalDeadlockError(
                f"No room can be connected: {len(unselected_rooms)} rooms left "
                f"({', '.join(str(room.id) for room in unselected_rooms)}) with "
                f"{composition.one_way} one-way and {composition.two_way} two-way exits open")

        selected_room = self.rng.choice(selectable_rooms)
        return self._MakeRoomConnection(exits, composition, selected_room)

    def _ChooseConnectionType(self, composition: PoolComposition, room: Room) -> ExitType:
        possible_types = [
            exit_type for exit_type in (ExitType.ONE_WAY, ExitType.TWO_WAY)
            if composition.Has(exit_type) and room.GetEntrances(exit_type)
        ]
        # Selectable rooms always have at least one matching type
        assert possible_types, f"Room {room.id} has no entrance matching the open exits"
        if len(possible_types) == 1:
            return possible_types[0]
        return self.rng.choice(possible_types)

    def _MakeRoomConnection(self, exits: List[Exit], composition: PoolComposition,
                            room: Room) -> RoomConnection:
        exit_type = self._ChooseConnectionType(composition, room)
        exit = self.rng.choice([e for e in exits if e.exit_type == exit_type])
        entrance = self.rng.choice(room.GetEntrances(exit_type))

        doors = self._MakeDoors(entrance, exit, exit_type)
        new_exits = self._FindRemainingExits(room, entrance, exit_type)
        leftover_one_way_entrances = [
            one_way_entrance for one_way_entrance in room.one_way_entrances
            if one_way_entrance != entrance
        ]
        return RoomConnection(room, exit_type, exit, doors, new_exits, leftover_one_way_entrances)

    def _MakeDoors(self, entrance: Destination, exit: Exit, exit_type: ExitType) -> List[Door]:
        if exit_type == ExitType.ONE_WAY:
            return [Door(entrance, exit)]
        # Going back out through the entrance's doorway leads to the other side of `exit`.
        return [
            Door(entrance, exit),
            Door(self.connectivity_index.FindCorrespondingDestination(exit),
                 self.connectivity_index.FindCorrespondingExit(entrance)),
        ]

    def _FindRemainingExits(self, room: Room, entrance: Destination, exit_type: ExitType) -> List[Exit]:
        if exit_type == ExitType.ONE_WAY:
            return list(room.exits)
        # The doorway we came in through has already been resolved as the way back.
        used_exit = self.connectivity_index.FindCorrespondingExit(entrance)
        return list(room.one_way_exits) + [e for e in room.two_way_exits if e != used_exit]

    @staticmethod
    def _CalculateNewExits(exits: List[Exit], used_exit: Exit, new_exits: List[Exit]) -> List[Exit]:
        return [exit for exit in exits if exit != used_exit] + new_exits

    def _ResolveLeftovers(self, exits: List[Exit],
                          leftover_one_way_entrances: List[Destination]) -> List[Door]:
        """Pair exits left in the pool once every room is connected.

        One-way exits take the unused one-way entrances in order. Two-way
        exits are split in half and each pair is wired as a two-way doorway.
        """
        one_way_exits = [exit for exit in exits if exit.IsOneWay()]
        two_way_exits = [exit for exit in exits if exit.IsTwoWay()]
        log.debug(f"Resolving {len(one_way_exits)} one-way and {len(two_way_exits)} two-way leftover exits "
                  f"against {len(leftover_one_way_entrances)} one-way entrances")

        if len(one_way_exits) != len(leftover_one_way_entrances):
            raise MatchingCountError(
                f"{len(one_way_exits)} one-way exits are left over but "
                f"{len(leftover_one_way_entrances)} one-way entrances are unused")
        if len(two_way_exits) % 2 != 0:
            raise MatchingCountError(f"Odd number of two-way exits left over: {len(two_way_exits)}")

        doors: List[Door] = []
        for entrance, exit in zip(leftover_one_way_entrances, one_way_exits):
            doors.append(Door(entrance, exit))

        split_index = len(two_way_exits) // 2
        for exit1, exit2 in zip(two_way_exits[:split_index], two_way_exits[split_index:]):
            exit1_entrance = self.connectivity_index.FindCorrespondingDestination(exit1)
            exit2_entrance = self.connectivity_index.FindCorrespondingDestination(exit2)
            doors.append(Door(exit2_entrance, exit1))
            doors.append(Door(exit1_entrance, exit2))
        return doors
