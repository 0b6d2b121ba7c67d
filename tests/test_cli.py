import io
import pytest
import sys
from pathlib import Path

# Add parent directory to path to import logic modules
sys.path.insert(0, str(Path(__file__).parent.parent))

import cli.cli as cli_module
from logic.randomizer import KatamRandomizer
from rom.rom_config import DEFAULT_OUTPUT_ROM
from map_builder import ROM_SIZE, MapBuilder, hub_map


@pytest.fixture
def small_start_room(monkeypatch):
    """Start from an exit that fits in the small test ROM."""
    monkeypatch.setattr(cli_module, "DEFAULT_STARTING_ROOM", MapBuilder.starting_room())


@pytest.fixture
def inputs(tmp_path):
    rom_path = tmp_path / "base.gba"
    rom_path.write_bytes(bytes(ROM_SIZE))
    door_path, room_path = hub_map().write(tmp_path)
    return tmp_path, [
        "--input-file", str(rom_path),
        "--door-data", door_path,
        "--room-data", room_path,
        "--output-dir", str(tmp_path / "out"),
    ]


def test_writes_patched_rom_and_spoiler(inputs, small_start_room, capsys):
    tmp_path, args = inputs
    assert cli_module.main(args + ["--seed", "5", "--spoiler-log", "spoiler.txt"]) == 0

    output_path = tmp_path / "out" / DEFAULT_OUTPUT_ROM
    assert output_path.exists()
    assert output_path.read_bytes() != bytes(ROM_SIZE)
    # Base ROM is left alone
    assert (tmp_path / "base.gba").read_bytes() == bytes(ROM_SIZE)

    spoiler = (tmp_path / "out" / "spoiler.txt").read_text()
    assert spoiler.startswith("Seed: 5\n")

    out = capsys.readouterr().out
    assert f"Randomized ROM written to {output_path}" in out
    assert "Seed 5, patch hash " in out


def test_same_seed_same_rom(inputs, small_start_room):
    tmp_path, args = inputs
    assert cli_module.main(args + ["--seed", "123", "--output-file", "a.gba"]) == 0
    assert cli_module.main(args + ["--seed", "123", "--output-file", "b.gba"]) == 0
    assert (tmp_path / "out" / "a.gba").read_bytes() == (tmp_path / "out" / "b.gba").read_bytes()


def test_output_matches_patched_rom(inputs, small_start_room):
    tmp_path, args = inputs
    assert cli_module.main(args + ["--seed", "42"]) == 0

    door_table, rooms = hub_map().build()
    randomizer = KatamRandomizer(io.BytesIO(bytes(ROM_SIZE)), 42, door_table, rooms,
                                 starting_room=MapBuilder.starting_room())
    expected = randomizer.GetPatchedRom().GetBytes()
    assert (tmp_path / "out" / DEFAULT_OUTPUT_ROM).read_bytes() == expected


def test_failed_spoiler_write_leaves_no_rom(inputs, small_start_room):
    tmp_path, args = inputs
    # A directory where the spoiler file should go makes the write fail
    (tmp_path / "out" / "spoiler.txt").mkdir(parents=True)
    assert cli_module.main(args + ["--seed", "5", "--spoiler-log", "spoiler.txt"]) == 1
    assert not (tmp_path / "out" / DEFAULT_OUTPUT_ROM).exists()

def test_random_seed_is_reported(inputs, small_start_room, capsys):
    _, args = inputs
    assert cli_module.main(args) == 0
    assert "Using random seed " in capsys.readouterr().out


def test_missing_rom_is_a_usage_error(inputs, small_start_room, capsys):
    tmp_path, args = inputs
    args[args.index("--input-file") + 1] = str(tmp_path / "missing.gba")
    with pytest.raises(SystemExit) as exc_info:
        cli_module.main(args + ["--seed", "1"])
    assert exc_info.value.code == 2
    assert "Input ROM not found" in capsys.readouterr().err


def test_bad_door_data_is_a_usage_error(inputs, small_start_room, capsys):
    tmp_path, args = inputs
    bad_doors = tmp_path / "bad.csv"
    bad_doors.write_text("doorid,destination,exitaddr1,exitaddr2,isoneway,linkeddoor\n1,zz,10,20,true,\n")
    args[args.index("--door-data") + 1] = str(bad_doors)
    with pytest.raises(SystemExit):
        cli_module.main(args + ["--seed", "1"])
    assert "destination" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_deadlock_writes_nothing(tmp_path, small_start_room, capsys):
    rom_path = tmp_path / "base.gba"
    rom_path.write_bytes(bytes(ROM_SIZE))
    door_path, room_path = (MapBuilder()
        .entry(1)
        .one_way_passage(1, 1)
        .two_way_passage(2, 3)
        .write(tmp_path))
    with pytest.raises(SystemExit):
        cli_module.main(["--seed", "1", "--input-file", str(rom_path), "--door-data", door_path,
                         "--room-data", room_path, "--output-dir", str(tmp_path / "out")])
    assert "No room can be connected" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_rom_too_small_for_start_exit_writes_nothing(inputs, capsys):
    # The real starting exit lives far past the end of the test ROM
    tmp_path, args = inputs
    with pytest.raises(SystemExit):
        cli_module.main(args + ["--seed", "1"])
    assert "past the end" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


@pytest.mark.parametrize("seed", ["-1", str(2**32), "abc"])
def test_invalid_seed_is_rejected(inputs, seed):
    _, args = inputs
    with pytest.raises(SystemExit):
        cli_module.main(args + ["--seed", seed])


def test_resolve_output_path(tmp_path):
    output_dir = tmp_path / "out"
    assert cli_module.resolve_output_path(output_dir, None) == output_dir / DEFAULT_OUTPUT_ROM
    assert cli_module.resolve_output_path(output_dir, "x.gba") == output_dir / "x.gba"
    absolute = tmp_path / "elsewhere" / "y.gba"
    assert cli_module.resolve_output_path(output_dir, str(absolute)) == absolute
