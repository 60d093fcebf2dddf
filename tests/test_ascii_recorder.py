import cv2
import numpy as np
import pytest

from glyphart.ascii_recorder import (
    create_palette_atlas,
    load_palette,
    main,
    render_palette,
    write_raster,
)
from glyphart.charsets import PALETTE_CHARS, TILE_SIZE
from glyphart.errors import EncodeError, PaletteDecodeError

GLYPH_COUNT = len(PALETTE_CHARS)


def flat_atlas():
    atlas = np.zeros((TILE_SIZE, TILE_SIZE * GLYPH_COUNT), dtype=np.uint8)
    for idx in range(GLYPH_COUNT):
        atlas[:, idx * TILE_SIZE:(idx + 1) * TILE_SIZE] = idx * 10
    return atlas


def test_palette_has_ramp_and_edge_glyphs():
    assert GLYPH_COUNT == 14
    assert PALETTE_CHARS[10:] == "-\\|/"


def test_render_palette_tiles_cells():
    glyphs = np.array([[0, 13], [4, 10]], dtype=np.int64)
    image = render_palette(glyphs, flat_atlas())
    assert image.shape == (16, 16, 3)
    assert image.dtype == np.uint8
    assert (image[:8, :8] == 0).all()
    assert (image[:8, 8:] == 130).all()
    assert (image[8:, :8] == 40).all()
    assert (image[8:, 8:] == 100).all()


def test_render_palette_copies_texels_to_every_channel():
    atlas = np.arange(TILE_SIZE * TILE_SIZE * GLYPH_COUNT, dtype=np.int64).reshape(TILE_SIZE, -1) % 256
    atlas = atlas.astype(np.uint8)
    image = render_palette(np.array([[3]], dtype=np.int64), atlas)
    tile = atlas[:, 3 * TILE_SIZE:4 * TILE_SIZE]
    for c in range(3):
        assert (image[:, :, c] == tile).all()


def test_render_palette_rejects_missing_glyph():
    with pytest.raises(ValueError):
        render_palette(np.array([[13]], dtype=np.int64), flat_atlas()[:, :TILE_SIZE * 10])


def test_load_palette_quantizes_and_crops(tmp_path):
    path = tmp_path / "palette.png"
    image = np.zeros((10, TILE_SIZE * GLYPH_COUNT + 5, 3), dtype=np.uint8)
    image[:, :] = (30, 60, 91)
    cv2.imwrite(str(path), image)
    atlas = load_palette(path)
    assert atlas.shape == (TILE_SIZE, TILE_SIZE * GLYPH_COUNT)
    # 181 // 3
    assert (atlas == 60).all()


def test_load_palette_missing(tmp_path):
    with pytest.raises(PaletteDecodeError):
        load_palette(tmp_path / "nope.png")


def test_load_palette_too_small(tmp_path):
    path = tmp_path / "small.png"
    cv2.imwrite(str(path), np.zeros((8, 8 * 10, 3), dtype=np.uint8))
    with pytest.raises(PaletteDecodeError):
        load_palette(path)


def test_create_palette_atlas():
    atlas = create_palette_atlas()
    assert atlas.shape == (TILE_SIZE, TILE_SIZE * GLYPH_COUNT, 3)
    assert not atlas[:, :TILE_SIZE].any()
    assert atlas[:, 9 * TILE_SIZE:10 * TILE_SIZE].any()


def test_write_raster_bad_extension(tmp_path):
    with pytest.raises(EncodeError):
        write_raster(tmp_path / "out.notanimage", np.zeros((8, 8, 3), dtype=np.uint8))


def test_palette_cli_round_trip(tmp_path, capsys):
    path = tmp_path / "palette.png"
    main([str(path)])
    assert "14 glyphs" in capsys.readouterr().out
    atlas = load_palette(path)
    assert atlas.shape == (TILE_SIZE, TILE_SIZE * GLYPH_COUNT)
    assert atlas.any()


def test_palette_cli_missing_font(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "palette.png"), "--font", str(tmp_path / "missing.ttf")])
    assert exc.value.code == 1
