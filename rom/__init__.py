"""ROM and map data access module.

Public API:
    RomImage - In-memory ROM that patches are applied to
    DoorTable, DoorRecord - Parsed door table
    load_door_table, load_rooms, parse_door_table, parse_rooms - Loading functions
    StartingRoomConfig, DEFAULT_STARTING_ROOM - Where the shuffle starts

Example:
    from rom import RomImage, load_door_table, load_rooms

    door_table = load_door_table("doordata.csv")
    rooms = load_rooms("roomdata.csv", door_table)
    rom_image = RomImage.FromFile("Kirby & The Amazing Mirror (U).gba")
"""

from .door_data import DoorRecord, DoorTable, load_door_table, load_rooms, parse_door_table, parse_rooms
from .rom_config import (DEFAULT_DOOR_DATA, DEFAULT_INPUT_ROM, DEFAULT_OUTPUT_ROM, DEFAULT_ROOM_DATA,
                         DEFAULT_STARTING_ROOM, StartingRoomConfig)
from .rom_image import RomImage

__all__ = [
    # Main API
    'RomImage',
    'DoorRecord',
    'DoorTable',
    # Loading functions
    'load_door_table',
    'load_rooms',
    'parse_door_table',
    'parse_rooms',
    # Configuration
    'StartingRoomConfig',
    'DEFAULT_STARTING_ROOM',
    'DEFAULT_INPUT_ROM',
    'DEFAULT_OUTPUT_ROM',
    'DEFAULT_DOOR_DATA',
    'DEFAULT_ROOM_DATA',
]
