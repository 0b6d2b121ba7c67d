"""Door and room table loading.

This module turns the two CSV tables that describe the game's map into typed
records:

- The door table has one row per door: where the door leads (a 4 byte
  location code written as hex pairs), the two ROM addresses holding that
  code, whether the door is one-way, and for two-way doors the id of the door
  on the other side.
- The room table lists, per room, the door ids of its one-way entrances,
  two-way entrances, one-way exits and two-way exits.

Door ids don't need to be contiguous. The door table is indexed by id and
sized to the largest id plus one, leaving holes for missing ids.
"""

import csv
import logging as log
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from logic.errors import RecordFormatError, ReferentialError, UnknownDoorError
from logic.randomizer_constants import DESTINATION_SIZE, DoorId, ExitType, RoomId
from logic.room import Destination, Exit, Room


DOOR_TABLE_COLUMNS = ('doorid', 'destination', 'exitaddr1', 'exitaddr2', 'isoneway', 'linkeddoor')
ROOM_TABLE_COLUMNS = ('roomid', 'onewayentranceids', 'twowayentranceids', 'onewayexitids', 'twowayexitids')
# Columns that may be left out of the file entirely
OPTIONAL_DOOR_COLUMNS = {'linkeddoor'}
OPTIONAL_ROOM_COLUMNS = {'onewayentranceids', 'twowayentranceids', 'onewayexitids', 'twowayexitids'}

DECIMAL_PATTERN = re.compile(r"[0-9]+")
HEX_PATTERN = re.compile(r"[0-9A-Fa-f]+")
HEX_BYTE_PATTERN = re.compile(r"[0-9A-Fa-f]{1,2}")

TRUE_STRINGS = {'true', '1', 'yes', 'y'}
FALSE_STRINGS = {'false', '0', 'no', 'n'}


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip a CSV cell, mapping empty and missing cells to None."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def _parse_int(value: Optional[str], column: str, row_desc: str, base: int = 10) -> int:
    value = _clean(value)
    if value is None:
        raise RecordFormatError(f"{row_desc}: missing required field '{column}'")
    # Bare digits only: no 0x prefix, sign or underscores
    pattern = HEX_PATTERN if base == 16 else DECIMAL_PATTERN
    if not pattern.fullmatch(value):
        kind = "hexadecimal" if base == 16 else "integer"
        raise RecordFormatError(f"{row_desc}: '{column}' is not a valid {kind} value: {value!r}")
    return int(value, base)


def _parse_bool(value: Optional[str], column: str, row_desc: str) -> bool:
    value = _clean(value)
    if value is None:
        raise RecordFormatError(f"{row_desc}: missing required field '{column}'")
    if value.lower() in TRUE_STRINGS:
        return True
    if value.lower() in FALSE_STRINGS:
        return False
    raise RecordFormatError(f"{row_desc}: '{column}' is not a boolean: {value!r}")


def _parse_id_list(value: Optional[str], column: str, row_desc: str) -> List[int]:
    value = _clean(value)
    if value is None:
        return []
    return [_parse_int(token, column, row_desc) for token in value.split()]


def _check_columns(fieldnames: Optional[List[str]], expected: Iterable[str],
                   optional: Iterable[str], table_name: str) -> None:
    present = {name.strip() for name in (fieldnames or [])}
    missing = [name for name in expected if name not in present and name not in optional]
    if missing:
        raise RecordFormatError(
            f"{table_name} is missing required column(s): {', '.join(missing)}")


@dataclass(frozen=True)
class DoorRecord:
    """One row of the door table, kept as text until extracted."""
    door_id: DoorId
    destination: str
    exit_addr1: str
    exit_addr2: str
    is_one_way: bool
    linked_door: Optional[DoorId] = None

    def ExtractDestination(self) -> Destination:
        """Parse the whitespace separated hex pairs into a destination."""
        tokens = self.destination.split()
        if not all(HEX_BYTE_PATTERN.fullmatch(token) for token in tokens):
            raise RecordFormatError(
                f"Door {self.door_id}: destination is not a list of hex bytes: {self.destination!r}")
        payload = bytes(int(token, 16) for token in tokens)
        if len(payload) != DESTINATION_SIZE:
            raise RecordFormatError(
                f"Door {self.door_id}: destination must be {DESTINATION_SIZE} bytes, "
                f"got {len(payload)}: {self.destination!r}")
        return Destination(self.door_id, payload)

    def ExtractExit(self) -> Exit:
        row_desc = f"Door {self.door_id}"
        exit_addr1 = _parse_int(self.exit_addr1, 'exitaddr1', row_desc, base=16)
        exit_addr2 = _parse_int(self.exit_addr2, 'exitaddr2', row_desc, base=16)
        exit_type = ExitType.ONE_WAY if self.is_one_way else ExitType.TWO_WAY
        return Exit(self.door_id, exit_addr1, exit_addr2, exit_type, self.linked_door)

    @property
    def exit_type(self) -> ExitType:
        return ExitType.ONE_WAY if self.is_one_way else ExitType.TWO_WAY


class DoorTable:
    """Door records indexed by door id, with holes for unused ids."""

    def __init__(self, records: Iterable[DoorRecord]) -> None:
        records = list(records)
        size = max(record.door_id for record in records) + 1 if records else 0
        self._records: List[Optional[DoorRecord]] = [None] * size
        for record in records:
            if record.door_id < 0:
                raise RecordFormatError(f"Door id must not be negative: {record.door_id}")
            if self._records[record.door_id] is not None:
                raise RecordFormatError(f"Door {record.door_id} is defined more than once")
            self._records[record.door_id] = record

    @property
    def size(self) -> int:
        """Table size: the largest door id plus one."""
        return len(self._records)

    def __len__(self) -> int:
        return sum(1 for record in self._records if record is not None)

    def __iter__(self) -> Iterator[DoorRecord]:
        return (record for record in self._records if record is not None)

    def __contains__(self, door_id: int) -> bool:
        return 0 <= door_id < len(self._records) and self._records[door_id] is not None

    def Get(self, door_id: int) -> DoorRecord:
        if door_id not in self:
            raise UnknownDoorError(f"Door {door_id} is not in the door table")
        return self._records[door_id]


def _door_record_from_row(row: Dict[str, Optional[str]], line_num: int) -> DoorRecord:
    row_desc = f"Door table line {line_num}"
    door_id = _parse_int(row.get('doorid'), 'doorid', row_desc)
    row_desc = f"Door {door_id} (line {line_num})"

    destination = _clean(row.get('destination'))
    if destination is None:
        raise RecordFormatError(f"{row_desc}: missing required field 'destination'")
    exit_addr1 = _clean(row.get('exitaddr1'))
    exit_addr2 = _clean(row.get('exitaddr2'))
    if exit_addr1 is None or exit_addr2 is None:
        raise RecordFormatError(f"{row_desc}: both exit addresses are required")

    linked_door = None
    if _clean(row.get('linkeddoor')) is not None:
        linked_door = DoorId(_parse_int(row.get('linkeddoor'), 'linkeddoor', row_desc))

    record = DoorRecord(
        door_id=DoorId(door_id),
        destination=destination,
        exit_addr1=exit_addr1,
        exit_addr2=exit_addr2,
        is_one_way=_parse_bool(row.get('isoneway'), 'isoneway', row_desc),
        linked_door=linked_door)

    # Parse both halves now so bad data is reported at load time.
    record.ExtractDestination()
    record.ExtractExit()
    return record


def _normalized_rows(reader: csv.DictReader) -> Iterator[Dict[str, Optional[str]]]:
    for row in reader:
        yield {key.strip(): value for key, value in row.items() if key is not None}


def parse_door_table(lines: Iterable[str]) -> DoorTable:
    """Parse door table CSV text (header line included)."""
    reader = csv.DictReader(lines)
    _check_columns(reader.fieldnames, DOOR_TABLE_COLUMNS, OPTIONAL_DOOR_COLUMNS, "Door table")
    records = []
    # Line 1 is the header
    for line_num, row in enumerate(_normalized_rows(reader), start=2):
        records.append(_door_record_from_row(row, line_num))
    if not records:
        raise RecordFormatError("Door table contains no doors")
    door_table = DoorTable(records)
    log.info(f"Loaded {len(door_table)} doors (table size {door_table.size})")
    return door_table


def _resolve_doors(door_table: DoorTable, door_ids: List[int], expected_type: ExitType,
                   room_id: int, column: str) -> List[DoorRecord]:
    door_records = []
    for door_id in door_ids:
        try:
            record = door_table.Get(door_id)
        except UnknownDoorError:
            raise UnknownDoorError(f"Room {room_id} references unknown door {door_id} in '{column}'")
        if record.exit_type != expected_type:
            raise ReferentialError(
                f"Room {room_id} lists door {door_id} in '{column}' "
                f"but the door table says it is {record.exit_type}")
        door_records.append(record)
    return door_records


def parse_rooms(lines: Iterable[str], door_table: DoorTable) -> List[Room]:
    """Parse room table CSV text, resolving door ids against the door table."""
    reader = csv.DictReader(lines)
    _check_columns(reader.fieldnames, ROOM_TABLE_COLUMNS, OPTIONAL_ROOM_COLUMNS, "Room table")
    rooms: List[Room] = []
    seen_room_ids = set()

    for line_num, row in enumerate(_normalized_rows(reader), start=2):
        row_desc = f"Room table line {line_num}"
        room_id = _parse_int(row.get('roomid'), 'roomid', row_desc)
        if room_id in seen_room_ids:
            raise RecordFormatError(f"Room {room_id} is defined more than once")
        seen_room_ids.add(room_id)
        row_desc = f"Room {room_id} (line {line_num})"

        def doors(column: str, expected_type: ExitType) -> List[DoorRecord]:
            ids = _parse_id_list(row.get(column), column, row_desc)
            return _resolve_doors(door_table, ids, expected_type, room_id, column)

        rooms.append(Room(
            id=RoomId(room_id),
            one_way_entrances=[r.ExtractDestination() for r in doors('onewayentranceids', ExitType.ONE_WAY)],
            two_way_entrances=[r.ExtractDestination() for r in doors('twowayentranceids', ExitType.TWO_WAY)],
            one_way_exits=[r.ExtractExit() for r in doors('onewayexitids', ExitType.ONE_WAY)],
            two_way_exits=[r.ExtractExit() for r in doors('twowayexitids', ExitType.TWO_WAY)]))

    log.info(f"Loaded {len(rooms)} rooms")
    return rooms


def load_door_table(path: Union[str, Path]) -> DoorTable:
    with open(path, newline='') as f:
        return parse_door_table(f)


def load_rooms(path: Union[str, Path], door_table: DoorTable) -> List[Room]:
    with open(path, newline='') as f:
        return parse_rooms(f, door_table)
