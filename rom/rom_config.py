"""ROM and input file configuration.

The starting room isn't part of the room table. The game drops the player
into it through a single one-way exit whose location code lives at two fixed
ROM addresses. That definition lives here as configuration instead of being
baked into the shuffler, so tests can use a synthetic starting room.
"""

from dataclasses import dataclass

from logic.randomizer_constants import Address, DoorId, ExitType, RoomId
from logic.room import Exit, Room


# Default input and output files for a Kirby & The Amazing Mirror (U) ROM
DEFAULT_INPUT_ROM = "Kirby & The Amazing Mirror (U).gba"
DEFAULT_OUTPUT_ROM = "Randomized Kirby and the Amazing Mirror.gba"
DEFAULT_DOOR_DATA = "doordata.csv"
DEFAULT_ROOM_DATA = "roomdata.csv"


@dataclass(frozen=True)
class StartingRoomConfig:
    """Definition of the room the player starts in.

    Attributes:
        room_id: Id of the starting room. A room table entry with the same
            id is left out of the shuffle.
        exit_id: Id of the starting room's only (one-way) exit
        exit_addr1: First ROM address holding the exit's location code
        exit_addr2: Second ROM address holding the exit's location code
    """
    room_id: RoomId = RoomId(0)
    exit_id: DoorId = DoorId(0)
    exit_addr1: Address = 0x873450
    exit_addr2: Address = 0x930E04

    def BuildRoom(self) -> Room:
        start_exit = Exit(self.exit_id, self.exit_addr1, self.exit_addr2, ExitType.ONE_WAY)
        return Room(self.room_id, one_way_exits=(start_exit,))


DEFAULT_STARTING_ROOM = StartingRoomConfig()
