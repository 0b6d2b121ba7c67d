from typing import NewType
from enum import Enum

DoorId = NewType("DoorId", int)
RoomId = NewType("RoomId", int)
Address = int

# Every destination is written into the ROM as a 4 byte location code
DESTINATION_SIZE = 4


class ExitType(Enum):
  ONE_WAY = "one_way"
  TWO_WAY = "two_way"

  def __str__(self) -> str:
    return {
        ExitType.ONE_WAY: "one-way",
        ExitType.TWO_WAY: "two-way",
    }[self]
