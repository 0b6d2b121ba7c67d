import io
import pytest
import sys
from pathlib import Path

# Add parent directory to path to import logic modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from logic.errors import PatchBoundsError, ReferentialError, TopologicalDeadlockError
from logic.randomizer import KatamRandomizer
from rom.door_data import DOOR_TABLE_COLUMNS, ROOM_TABLE_COLUMNS, parse_door_table, parse_rooms
from rom.rom_config import StartingRoomConfig
from map_builder import ROM_SIZE, MapBuilder, destination_bytes, hub_map


@pytest.fixture(scope="module")
def hub_tables():
    return hub_map().build()


def make_randomizer(tables, seed, rom_size=ROM_SIZE):
    door_table, rooms = tables
    return KatamRandomizer(io.BytesIO(bytes(rom_size)), seed, door_table, rooms,
                           starting_room=MapBuilder.starting_room())


def test_doors_are_cached(hub_tables):
    randomizer = make_randomizer(hub_tables, 11)
    assert randomizer.GetDoors() is randomizer.GetDoors()


@pytest.mark.parametrize("seed", range(20))
def test_patch_writes_every_door(hub_tables, seed):
    randomizer = make_randomizer(hub_tables, seed)
    doors = randomizer.GetDoors()
    patch = randomizer.GetPatch()
    # Two addresses per door
    assert len(patch) == 2 * len(doors)
    for door in doors:
        for address in door.exit.addresses:
            assert patch.GetData(address) == list(destination_bytes(door.destination.id))


def test_same_seed_same_patch(hub_tables):
    first = make_randomizer(hub_tables, 99).GetPatch()
    second = make_randomizer(hub_tables, 99).GetPatch()
    assert first.GetHashCode() == second.GetHashCode()


def test_patched_rom(hub_tables):
    randomizer = make_randomizer(hub_tables, 4)
    rom_image = randomizer.GetPatchedRom()
    assert len(rom_image) == ROM_SIZE
    start_door = randomizer.GetDoors()[0]
    start = MapBuilder.starting_room()
    assert start_door.exit.id == start.exit_id
    expected = list(start_door.destination.destination_bytes)
    assert rom_image.ReadBytes(start.exit_addr1, 4) == expected
    assert rom_image.ReadBytes(start.exit_addr2, 4) == expected


def test_small_rom_is_rejected(hub_tables):
    randomizer = make_randomizer(hub_tables, 4, rom_size=0x100)
    with pytest.raises(PatchBoundsError):
        randomizer.GetPatchedRom()


def test_spoiler_lines(hub_tables):
    randomizer = make_randomizer(hub_tables, 8)
    lines = randomizer.GetSpoilerLines()
    assert lines[0] == "Seed: 8"
    assert lines[1] == "Doors: 9"
    start = MapBuilder.starting_room()
    assert lines[3] == f"{start.exit_addr1:x} | {start.exit_addr2:x}"
    first_destination = randomizer.GetDoors()[0].destination.destination_bytes
    assert lines[4] == ", ".join(f"{byte:x}" for byte in first_destination)


def test_deadlocked_map_raises():
    tables = (MapBuilder()
        .entry(1)
        .one_way_passage(1, 1)
        .two_way_passage(2, 3)
        .build())
    with pytest.raises(TopologicalDeadlockError):
        make_randomizer(tables, 0).GetDoors()


def test_door_sharing_the_starting_exit_id_is_rejected():
    # Door 0 is a real one-way door, but the start room's exit is also id 0
    door_table = parse_door_table([
        ",".join(DOOR_TABLE_COLUMNS),
        "0,08 00 00 01,100,900,true,",
        "1,08 01 00 01,104,904,true,",
        "2,08 02 00 01,108,908,true,",
    ])
    rooms = parse_rooms([
        ",".join(ROOM_TABLE_COLUMNS),
        "1,1,,0 2,",
        "2,0,,,",
        "3,2,,,",
    ], door_table)
    randomizer = make_randomizer((door_table, rooms), 0)
    with pytest.raises(ReferentialError, match="Starting exit id 0"):
        randomizer.GetDoors()


def test_starting_exit_id_must_not_be_a_door_id(hub_tables):
    door_table, rooms = hub_tables
    start = StartingRoomConfig(exit_id=5, exit_addr1=0x40, exit_addr2=0x48)
    randomizer = KatamRandomizer(io.BytesIO(bytes(ROM_SIZE)), 1, door_table, rooms, starting_room=start)
    with pytest.raises(ReferentialError, match="also a door"):
        randomizer.GetPatch()
