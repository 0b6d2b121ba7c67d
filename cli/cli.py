#!/usr/bin/env python3
"""Command-line interface for running the KATAM door randomizer."""

import argparse
import io
import sys
import traceback
from pathlib import Path
import logging

# Ensure project root is on the import path when executing from the CLI folder
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from logic.errors import RandomizerError
from logic.randomizer import KatamRandomizer
from rng.random_number_generator import MAX_SEED, RandomNumberGenerator
from rom.door_data import load_door_table, load_rooms
from rom.rom_config import (DEFAULT_DOOR_DATA, DEFAULT_INPUT_ROM, DEFAULT_OUTPUT_ROM,
                            DEFAULT_ROOM_DATA, DEFAULT_STARTING_ROOM)
from rom.rom_image import RomImage
from version import __version__


def seed_value(value: str) -> int:
    seed = int(value)
    if not 0 <= seed <= MAX_SEED:
        raise argparse.ArgumentTypeError(f"seed must be between 0 and {MAX_SEED}")
    return seed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Shuffle the doors of Kirby & The Amazing Mirror and write a patched ROM.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--seed",
        type=seed_value,
        help="Seed value to use when shuffling. A random seed is chosen and "
             "reported if omitted.")
    parser.add_argument(
        "--input-file",
        default=DEFAULT_INPUT_ROM,
        help=f"Path to the base ROM (.gba) file to randomize (default: {DEFAULT_INPUT_ROM}).")
    parser.add_argument(
        "--door-data",
        default=DEFAULT_DOOR_DATA,
        help=f"CSV file describing every door (default: {DEFAULT_DOOR_DATA}).")
    parser.add_argument(
        "--room-data",
        default=DEFAULT_ROOM_DATA,
        help=f"CSV file listing each room's entrances and exits (default: {DEFAULT_ROOM_DATA}).")
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory where the randomized ROM will be written (default: current directory).")
    parser.add_argument(
        "--output-file",
        help="Optional filename or path for the randomized ROM. "
             "If relative, it is placed inside --output-dir.")
    parser.add_argument(
        "--spoiler-log",
        help="Optional path for a text file listing every shuffled door. "
             "If relative, it is placed inside --output-dir.")
    parser.add_argument( '-log',
        '--loglevel',
        default='warning',
        help='Provide logging level. Example --loglevel debug, default=warning' )

    return parser


def resolve_output_path(output_dir: Path, output_file: str | None,
                        default_name: str = DEFAULT_OUTPUT_ROM) -> Path:
    candidate = Path(output_file) if output_file else Path(default_name)
    if candidate.is_absolute():
        return candidate
    return output_dir / candidate


def run_randomizer(
        seed: int,
        input_path: Path,
        door_data_path: Path,
        room_data_path: Path,
        output_dir: Path,
        output_file: str | None = None,
        spoiler_log: str | None = None) -> tuple[Path, str]:
    """Shuffle, patch and save. Returns the output path and the patch hash.

    Nothing is written unless the whole shuffle and patch succeeded. The
    spoiler log goes out before the ROM, so a failed spoiler write leaves no
    ROM behind.
    """
    rom_bytes = io.BytesIO(RomImage.FromFile(input_path).GetBytes())
    door_table = load_door_table(door_data_path)
    rooms = load_rooms(room_data_path, door_table)

    randomizer = KatamRandomizer(rom_bytes, seed, door_table, rooms,
                                 starting_room=DEFAULT_STARTING_ROOM)
    patched_rom = randomizer.GetPatchedRom()
    hash_code = randomizer.GetPatch().GetHashCode()
    spoiler_lines = randomizer.GetSpoilerLines() if spoiler_log else None

    if spoiler_lines is not None:
        spoiler_path = resolve_output_path(output_dir, spoiler_log)
        spoiler_path.parent.mkdir(parents=True, exist_ok=True)
        spoiler_path.write_text("\n".join(spoiler_lines) + "\n")
        logging.info(f"Wrote spoiler log to {spoiler_path}")

    output_path = patched_rom.Save(resolve_output_path(output_dir, output_file))
    return output_path, hash_code


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        logging.basicConfig(level=args.loglevel.upper())

        seed = args.seed
        if seed is None:
            seed = RandomNumberGenerator.WithRandomSeed().seed
            print(f"Using random seed {seed}")

        output_path, hash_code = run_randomizer(
            seed=seed,
            input_path=Path(args.input_file),
            door_data_path=Path(args.door_data),
            room_data_path=Path(args.room_data),
            output_dir=Path(args.output_dir),
            output_file=args.output_file,
            spoiler_log=args.spoiler_log)
    except (RandomizerError, ValueError, FileNotFoundError) as exc:
        parser.error(str(exc))
    except Exception as exc:  # pragma: no cover
        print(f"Error: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1
    else:
        print(f"Randomized ROM written to {output_path}")
        print(f"Seed {seed}, patch hash {hash_code}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
