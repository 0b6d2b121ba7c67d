"""Lookups into the original (unshuffled) door layout.

The shuffler never asks "where does this door go now?" of this index. It only
asks how the vanilla game wired things up, so that a newly placed two-way
door can reuse the vanilla geometry of the door on the other side:

- Every destination belongs to exactly one exit (they come from the same
  door record) and vice versa.
- Every two-way door is linked to the door on the other side of the same
  doorway.

The index is built once from the door table and never changes afterwards.
"""

import logging as log
from typing import Dict, Iterable, Tuple

from rom.door_data import DoorTable
from .errors import ConnectivityLookupError, ReferentialError
from .randomizer_constants import DoorId
from .room import Destination, Door, Exit


class ConnectivityIndex:
    """Bidirectional destination<->exit and door<->door lookups."""

    def __init__(self, pairs: Iterable[Tuple[Destination, Exit]],
                 links: Iterable[Tuple[Door, Door]] = ()) -> None:
        """Build the index.

        Args:
            pairs: (destination, exit) pairs from the original door records
            links: (door, linked door) pairs for two-way doors. Each link only
                needs to be given once; lookups work in both directions.

        Raises:
            ReferentialError: If a destination or exit shows up twice, or a
                link refers to a door that isn't one of the pairs.
        """
        self._exit_by_destination: Dict[DoorId, Exit] = {}
        self._destination_by_exit: Dict[DoorId, Destination] = {}
        self._links: Dict[Door, Door] = {}
        self._link_count = 0

        for destination, exit in pairs:
            if destination.id in self._exit_by_destination:
                raise ReferentialError(f"Destination {destination.id} has more than one exit")
            if exit.id in self._destination_by_exit:
                raise ReferentialError(f"Exit {exit.id} has more than one destination")
            self._exit_by_destination[destination.id] = exit
            self._destination_by_exit[exit.id] = destination

        for door, linked_door in links:
            for side in (door, linked_door):
                if self._exit_by_destination.get(side.destination.id) != side.exit:
                    raise ReferentialError(f"Linked door {side} is not an original door")
            if door in self._links:
                if self._links[door] != linked_door:
                    raise ReferentialError(
                        f"Door {door.exit.id} is linked to both {self._links[door].exit.id} "
                        f"and {linked_door.exit.id}")
                continue
            self._links[door] = linked_door
            self._links[linked_door] = door
            self._link_count += 1

    @classmethod
    def FromDoorTable(cls, door_table: DoorTable) -> "ConnectivityIndex":
        """Build the index from every record in the door table.

        Raises:
            ReferentialError: If a two-way door has no linked door, or the
                linked id isn't in the table or belongs to a one-way door.
        """
        pairs = []
        links = []
        for record in door_table:
            destination = record.ExtractDestination()
            exit = record.ExtractExit()
            pairs.append((destination, exit))

            if exit.IsTwoWay():
                if record.linked_door is None:
                    raise ReferentialError(f"Two-way door {record.door_id} has no linked door")
                if record.linked_door not in door_table:
                    raise ReferentialError(
                        f"Two-way door {record.door_id} is linked to unknown door {record.linked_door}")
                linked_record = door_table.Get(record.linked_door)
                if linked_record.is_one_way:
                    raise ReferentialError(
                        f"Two-way door {record.door_id} is linked to one-way door {record.linked_door}")
                links.append((Door(destination, exit),
                              Door(linked_record.ExtractDestination(), linked_record.ExtractExit())))

        index = cls(pairs, links)
        log.debug(f"Built connectivity index with {len(index)} doors and {index.link_count} links")
        return index

    def __len__(self) -> int:
        return len(self._exit_by_destination)

    @property
    def link_count(self) -> int:
        return self._link_count

    def GetExit(self, destination: Destination) -> Exit:
        """Return the exit that originally shared a door record with this destination."""
        try:
            return self._exit_by_destination[destination.id]
        except KeyError:
            raise ConnectivityLookupError(f"No original exit for destination {destination.id}") from None

    def GetDestination(self, exit: Exit) -> Destination:
        """Return the destination that originally shared a door record with this exit."""
        try:
            return self._destination_by_exit[exit.id]
        except KeyError:
            raise ConnectivityLookupError(f"No original destination for exit {exit.id}") from None

    def GetLinkedDoor(self, door: Door) -> Door:
        """Return the door on the other side of an original two-way door."""
        try:
            return self._links[door]
        except KeyError:
            raise ConnectivityLookupError(
                f"Door {door.destination.id}/{door.exit.id} has no original two-way link") from None

    def FindCorrespondingExit(self, destination: Destination) -> Exit:
        """Return the exit of the door linked to this destination's original door.

        This is the physical doorway a traveller arriving at `destination`
        is standing in, i.e. the way back out.
        """
        exit = self.GetExit(destination)
        assert exit.IsTwoWay(), f"Destination {destination.id} belongs to a one-way door"
        return self.GetLinkedDoor(Door(destination, exit)).exit

    def FindCorrespondingDestination(self, exit: Exit) -> Destination:
        """Return the destination of the door linked to this exit's original door.

        This is where a traveller coming back through the other side of
        `exit` should arrive.
        """
        assert exit.IsTwoWay(), f"Exit {exit.id} is a one-way door"
        destination = self.GetDestination(exit)
        return self.GetLinkedDoor(Door(destination, exit)).destination
