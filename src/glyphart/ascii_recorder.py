import argparse
import os
import sys

import cv2
import numpy as np
from numba import jit
from PIL import Image, ImageDraw, ImageFont

from .charsets import DEFAULT_PALETTE, PALETTE_CHARS, TILE_SIZE
from .errors import EncodeError, PaletteDecodeError


@jit(nopython=True)
def render_tiles_numba(glyph_indices, atlas, tile_size):
    height_chars, width_chars = glyph_indices.shape
    img = np.zeros((height_chars * tile_size, width_chars * tile_size, 3), dtype=np.uint8)
    for y in range(height_chars):
        for x in range(width_chars):
            x_atlas = glyph_indices[y, x] * tile_size
            y_start = y * tile_size
            x_start = x * tile_size
            for ty in range(tile_size):
                for tx in range(tile_size):
                    value = atlas[ty, x_atlas + tx]
                    for c in range(3):
                        img[y_start + ty, x_start + tx, c] = value
    return img


def quantize_atlas(image_bgr):
    return (image_bgr.astype(np.int64).sum(axis=2) // 3).astype(np.uint8)


def load_palette(path=DEFAULT_PALETTE, glyph_count=len(PALETTE_CHARS)):
    """
    Load a glyph atlas: one 8x8 tile per glyph laid out left to right.

    Texels are reduced to (R + G + B) // 3 and only the first tile row is kept.
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise PaletteDecodeError(f"Cannot read palette image '{path}'")
    height, width = image.shape[:2]
    if height < TILE_SIZE or width < TILE_SIZE * glyph_count:
        raise PaletteDecodeError(
            f"Palette '{path}' is {width}x{height}, need at least {TILE_SIZE * glyph_count}x{TILE_SIZE}")
    atlas = quantize_atlas(image[:TILE_SIZE, :TILE_SIZE * glyph_count])
    atlas.setflags(write=False)
    return atlas


def render_palette(glyph_indices, atlas):
    glyph_count = atlas.shape[1] // TILE_SIZE
    if atlas.shape[0] < TILE_SIZE:
        raise ValueError(f"Palette must be at least {TILE_SIZE} rows tall, got {atlas.shape[0]}")
    if glyph_indices.size and glyph_indices.max() >= glyph_count:
        raise ValueError(f"Palette holds {glyph_count} glyphs, grid needs index {glyph_indices.max()}")
    indices = np.ascontiguousarray(glyph_indices, dtype=np.int64)
    return render_tiles_numba(indices, np.ascontiguousarray(atlas, dtype=np.uint8), TILE_SIZE)


def write_raster(path, image):
    try:
        ok = cv2.imwrite(str(path), image)
    except cv2.error as e:
        raise EncodeError(f"Cannot encode raster '{path}': {e}") from e
    if not ok:
        raise EncodeError(f"Cannot write raster '{path}'")


def load_font(font_path=None):
    if font_path:
        try:
            return ImageFont.truetype(font_path, TILE_SIZE)
        except OSError:
            print(f"Warning: Could not load font '{font_path}', using the default font")
    return ImageFont.load_default()


def create_palette_atlas(font_path=None):
    """Render every palette glyph white on black into its own 8x8 tile."""
    font = load_font(font_path)
    atlas = Image.new("RGB", (TILE_SIZE * len(PALETTE_CHARS), TILE_SIZE), (0, 0, 0))
    draw = ImageDraw.Draw(atlas)
    for idx, char in enumerate(PALETTE_CHARS):
        if char == ' ':
            continue
        bbox = draw.textbbox((0, 0), char, font=font)
        text_width = bbox[2] - bbox[0]
        text_height = bbox[3] - bbox[1]
        x_offset = (TILE_SIZE - text_width) // 2 - bbox[0]
        y_offset = (TILE_SIZE - text_height) // 2 - bbox[1]
        # Glyphs larger than a tile are clipped to it.
        tile = Image.new("RGB", (TILE_SIZE, TILE_SIZE), (0, 0, 0))
        ImageDraw.Draw(tile).text((x_offset, y_offset), char, font=font, fill=(255, 255, 255))
        atlas.paste(tile, (idx * TILE_SIZE, 0))
    return cv2.cvtColor(np.array(atlas), cv2.COLOR_RGB2BGR)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Build the glyph palette atlas used for raster output')
    parser.add_argument('output_file', nargs='?', default=DEFAULT_PALETTE,
                        help=f'Atlas output path (default: {DEFAULT_PALETTE})')
    parser.add_argument('--font', help='TrueType font to render glyphs with (default: Pillow built-in font)')
    args = parser.parse_args(argv)

    if args.font and not os.path.exists(args.font):
        print(f"Error: Font '{args.font}' not found")
        sys.exit(1)

    atlas = create_palette_atlas(args.font)
    try:
        write_raster(args.output_file, atlas)
    except EncodeError as e:
        print(f"Error: {e}")
        sys.exit(e.exit_code)
    print(f"Palette with {len(PALETTE_CHARS)} glyphs saved to {args.output_file} "
          f"({atlas.shape[1]}x{atlas.shape[0]})")


if __name__ == "__main__":
    main()
