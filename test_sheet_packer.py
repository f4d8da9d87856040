#!/usr/bin/env python3
"""
End-to-end tests for the single-bin spritesheet packer.
"""

import io
import json

import pytest
from PIL import Image

from spritepack_core import (AggregateError, InvalidConfigurationError, OutputMode, PackHeuristic, PlacementError,
                             SheetSpec, SingleBinPacker, UnsupportedOperationError)

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


def png_source(size, color):
    buffer = io.BytesIO()
    Image.new('RGBA', size, color).save(buffer, format='PNG')
    buffer.seek(0)
    return buffer


def save_png(path, size, color):
    Image.new('RGBA', size, color).save(path, format='PNG')
    return path


def is_power_of_two(value):
    return value > 0 and (value & (value - 1)) == 0


def test_default_sheet_spec():
    spec = SheetSpec()
    assert (spec.max_width, spec.max_height) == (4096, 4096)
    assert spec.power_of_two and not spec.square
    assert spec.extrude == 0
    assert spec.mode == OutputMode.OPTIMAL
    assert spec.heuristic == PackHeuristic.MAX_EDGE


def test_spec_coerces_enum_names():
    spec = SheetSpec(mode='FAST', heuristic='max_area')
    assert spec.mode == OutputMode.FAST
    assert spec.heuristic == PackHeuristic.MAX_AREA


@pytest.mark.parametrize("kwargs", [
    {'max_width': 0},
    {'max_height': -1},
    {'extrude': -1},
    {'mode': 'turbo'},
    {'heuristic': 'best_guess'},
])
def test_spec_rejects_invalid_values(kwargs):
    with pytest.raises(InvalidConfigurationError):
        SheetSpec(**kwargs)


def test_new_bin_reserves_room_for_extrusion():
    sheet_bin = SingleBinPacker(SheetSpec(extrude=1, square=True)).new_bin()
    assert sheet_bin.padding == 2
    assert sheet_bin.border == 1
    assert sheet_bin.growth_enabled
    assert sheet_bin.square


def test_pack_writes_png_and_json():
    names = ['red', 'green', 'blue']
    colors = [RED, GREEN, BLUE]
    sources = [png_source((32, 32), RED), png_source((64, 16), GREEN), png_source((16, 16), BLUE)]
    out_image = io.BytesIO()
    out_json = io.StringIO()

    result = SingleBinPacker().pack(names, sources, {'version': 1}, out_image, out_json)

    assert is_power_of_two(result.width) and is_power_of_two(result.height)
    assert result.placement_count == 3
    assert [frame.name for frame in result.frames] == names
    assert json.loads(out_json.getvalue()) == result.document
    assert out_json.getvalue().count('\n') == 1
    assert result.document['meta'] == {'version': 1}

    out_image.seek(0)
    with Image.open(out_image) as sheet:
        assert sheet.size == (result.width, result.height)
        sheet = sheet.convert('RGBA')

        for name, color in zip(names, colors):
            entry = result.document['frames'][name]['frame']
            assert sheet.getpixel((entry['x'], entry['y'])) == color
            assert sheet.getpixel((entry['x'] + entry['w'] - 1, entry['y'] + entry['h'] - 1)) == color

    rects = [frame.rect for frame in result.frames]
    for i, a in enumerate(rects):
        for b in rects[i + 1:]:
            assert not a.collides(b)


def test_pack_with_extrusion_offsets_frames_by_border():
    out_image = io.BytesIO()
    out_json = io.StringIO()
    packer = SingleBinPacker(SheetSpec(extrude=1))

    result = packer.pack(['red'], [png_source((4, 4), RED)], None, out_image, out_json)

    assert (result.width, result.height) == (8, 8)
    assert result.document['frames']['red'] == {'frame': {'x': 1, 'y': 1, 'w': 4, 'h': 4}}

    out_image.seek(0)
    with Image.open(out_image) as sheet:
        sheet = sheet.convert('RGBA')
        assert sheet.getpixel((0, 0)) == RED
        assert sheet.getpixel((5, 5)) == RED
        assert sheet.getpixel((6, 6)) == TRANSPARENT


def test_fast_mode_indents_json():
    out_json = io.StringIO()
    packer = SingleBinPacker(SheetSpec(mode=OutputMode.FAST))

    packer.pack(['red'], [png_source((4, 4), RED)], None, io.BytesIO(), out_json)

    assert '\n    "frames"' in out_json.getvalue()


def test_pack_rejects_mismatched_inputs():
    with pytest.raises(InvalidConfigurationError, match="mismatch"):
        SingleBinPacker().pack(['a', 'b'], [png_source((4, 4), RED)], None, io.BytesIO(), io.StringIO())


def test_pack_rejects_empty_input():
    with pytest.raises(InvalidConfigurationError):
        SingleBinPacker().pack([], [], None, io.BytesIO(), io.StringIO())


def test_pack_rejects_wide_extrusion_before_decoding():
    out_image = io.BytesIO()
    packer = SingleBinPacker(SheetSpec(extrude=2))

    with pytest.raises(UnsupportedOperationError):
        packer.pack(['broken'], [io.BytesIO(b'not a png')], None, out_image, io.StringIO())

    assert out_image.getvalue() == b''


def test_pack_reports_every_decode_failure():
    out_image = io.BytesIO()
    sources = [io.BytesIO(b'junk'), png_source((4, 4), RED), io.BytesIO(b'more junk')]

    with pytest.raises(AggregateError) as excinfo:
        SingleBinPacker().pack(['a', 'b', 'c'], sources, None, out_image, io.StringIO())

    assert len(excinfo.value.errors) == 2
    message = str(excinfo.value)
    assert message.count('\n') == 1
    assert 'a:' in message and 'c:' in message
    assert out_image.getvalue() == b''


def test_pack_fails_when_frames_exceed_max_size():
    packer = SingleBinPacker(SheetSpec(max_width=64, max_height=64))

    with pytest.raises(PlacementError):
        packer.pack(['wide'], [png_source((100, 10), RED)], None, io.BytesIO(), io.StringIO())


def test_pack_files_writes_outputs_and_log(tmp_path):
    src = tmp_path / 'frames'
    src.mkdir()
    paths = [save_png(src / 'idle.png', (10, 10), RED), save_png(src / 'run.png', (20, 10), BLUE)]
    out_dir = tmp_path / 'out'

    result = SingleBinPacker().pack_files(paths, out_dir, 'hero', {'scale': 1})

    assert result.image_path == out_dir / 'hero.png'
    assert result.json_path == out_dir / 'hero.json'
    assert result.image_path.exists()

    document = json.loads(result.json_path.read_text(encoding='utf-8'))
    assert set(document['frames']) == {'idle', 'run'}
    assert document['meta'] == {'scale': 1}

    logs = list(out_dir.glob('hero_*.log'))
    assert len(logs) == 1
    log_text = logs[0].read_text(encoding='utf-8')
    assert 'Frames Packed: 2/2' in log_text
    assert 'Final Status: SUCCESS' in log_text


def test_pack_files_logs_failures(tmp_path):
    path = tmp_path / 'huge.png'
    save_png(path, (100, 100), RED)
    packer = SingleBinPacker(SheetSpec(max_width=32, max_height=32))

    with pytest.raises(PlacementError):
        packer.pack_files([path], tmp_path / 'out', 'huge')

    logs = list((tmp_path / 'out').glob('huge_*.log'))
    assert len(logs) == 1
    assert 'Final Status: FAILED' in logs[0].read_text(encoding='utf-8')


def test_pack_files_rejects_duplicate_names(tmp_path):
    (tmp_path / 'a').mkdir()
    (tmp_path / 'b').mkdir()
    paths = [save_png(tmp_path / 'a' / 'tile.png', (4, 4), RED), save_png(tmp_path / 'b' / 'tile.png', (4, 4), RED)]

    with pytest.raises(InvalidConfigurationError, match="Duplicate"):
        SingleBinPacker().pack_files(paths, tmp_path / 'out', 'tiles')
