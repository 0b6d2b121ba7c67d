import pytest
import sys
from pathlib import Path

# Add parent directory to path to import logic modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from logic.errors import PatchBoundsError
from logic.patch import Patch
from rom.rom_image import RomImage


@pytest.fixture
def rom_file(tmp_path):
    path = tmp_path / "base.gba"
    path.write_bytes(bytes(range(256)) * 16)
    return path


def test_load_and_read(rom_file):
    rom_image = RomImage.FromFile(rom_file)
    assert len(rom_image) == 0x1000
    assert rom_image.ReadBytes(0x10, 4) == [0x10, 0x11, 0x12, 0x13]
    assert rom_image.ReadBytes(0xFF) == [0xFF]


def test_missing_rom_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Input ROM not found"):
        RomImage.FromFile(tmp_path / "missing.gba")


def test_write_bytes():
    rom_image = RomImage.FromBytes(bytes(0x20))
    rom_image.WriteByte(0x7F, 0x01)
    rom_image.WriteBytes([0xAA, 0xBB], 0x1E)
    data = rom_image.GetBytes()
    assert data[0x01] == 0x7F
    assert data[0x1E:] == bytes([0xAA, 0xBB])


@pytest.mark.parametrize("address, num_bytes", [(-1, 1), (0x20, 1), (0x1F, 2)])
def test_access_outside_rom_is_rejected(address, num_bytes):
    rom_image = RomImage.FromBytes(bytes(0x20))
    with pytest.raises(PatchBoundsError):
        rom_image.ReadBytes(address, num_bytes)
    with pytest.raises(PatchBoundsError):
        rom_image.WriteBytes(bytes(num_bytes), address)


def test_apply_patch_and_save_leaves_source_untouched(rom_file, tmp_path):
    original = rom_file.read_bytes()
    rom_image = RomImage.FromFile(rom_file)
    patch = Patch()
    patch.AddData(0x10, [0xAA, 0xBB, 0xCC, 0xDD])
    rom_image.ApplyPatch(patch)

    output_path = rom_image.Save(tmp_path / "out" / "randomized.gba")
    assert output_path.exists()
    written = output_path.read_bytes()
    assert written[0x10:0x14] == bytes([0xAA, 0xBB, 0xCC, 0xDD])
    assert written[:0x10] == original[:0x10]
    assert written[0x14:] == original[0x14:]
    assert rom_file.read_bytes() == original


def test_input_bytes_are_copied():
    data = bytearray(4)
    rom_image = RomImage.FromBytes(data)
    rom_image.WriteByte(0x01, 0)
    assert data == bytearray(4)
