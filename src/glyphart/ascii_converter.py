import argparse
import os
import sys

import cv2
import numpy as np

from .ascii_recorder import load_palette, render_palette, write_raster
from .charsets import DEFAULT_PALETTE, glyph_text
from .errors import DecodeError, EncodeError, GlyphArtError
from .filters import check_scale, edge_field, freeze, gaussian_blur, sample_luminance
from .glyph_mapper import map_glyphs

DEFAULT_SCALE = 4
DEFAULT_OUTPUT = 'output.txt'


def load_image(path):
    """Decode an image file into an RGBA buffer. Returns (pixels, width, height)."""
    try:
        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise DecodeError(f"Cannot decode image '{path}': {e}") from e
    if image is None:
        raise DecodeError(f"Cannot open image file '{path}'")
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise DecodeError(f"Unsupported pixel depth {image.dtype} in '{path}'")
    if image.ndim == 2:
        pixels = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 4:
        pixels = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        pixels = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    height, width = pixels.shape[:2]
    return freeze(pixels), width, height


def image_to_glyphs(pixels, scale):
    luminance = sample_luminance(pixels, scale)
    blur3 = gaussian_blur(luminance, 3)
    blur7 = gaussian_blur(luminance, 7)
    edges = edge_field(blur3, blur7)
    return map_glyphs(luminance, edges)


def render_text(glyphs):
    return ''.join(''.join(glyph_text(idx) for idx in row) + '\n' for row in glyphs.tolist())


def write_text(path, text):
    try:
        with open(path, 'w', encoding='ascii', newline='\n') as f:
            f.write(text)
    except OSError as e:
        raise EncodeError(f"Cannot write text output '{path}': {e}") from e


def convert(pixels, scale, palette=None):
    """Run the whole pipeline. Returns (text, raster), raster is None without a palette."""
    glyphs = image_to_glyphs(pixels, scale)
    text = render_text(glyphs)
    raster = render_palette(glyphs, palette) if palette is not None else None
    return text, raster


def run(image_path, scale=DEFAULT_SCALE, output_path=DEFAULT_OUTPUT, image_out=None,
        palette_path=DEFAULT_PALETTE, write_text_output=True):
    pixels, width, height = load_image(image_path)
    print(f"Input image dimensions: {width} x {height}")
    scale = check_scale(scale, width, height)
    # Loaded up front so a bad palette aborts before anything is written.
    palette = load_palette(palette_path) if image_out else None
    text, raster = convert(pixels, scale, palette)
    del pixels
    print(f"Glyph grid: {width // scale} x {height // scale} (downscale factor {scale})")
    if write_text_output:
        write_text(output_path, text)
        print(f"ASCII art saved to {output_path}")
    if raster is not None:
        write_raster(image_out, raster)
        print(f"Glyph image saved to {image_out} ({raster.shape[1]}x{raster.shape[0]})")
    return text, raster


def main(argv=None):
    parser = argparse.ArgumentParser(description='Convert an image to edge-aware ASCII art')
    parser.add_argument('input_file', help='Path to the input image file')
    parser.add_argument('-s', '--scale', type=int, default=DEFAULT_SCALE,
                        help=f'Image downscaling factor, in pixels per glyph (default: {DEFAULT_SCALE})')
    parser.add_argument('-o', '--output', default=DEFAULT_OUTPUT,
                        help=f'Text output file path (default: {DEFAULT_OUTPUT})')
    parser.add_argument('--image-out', help='Also render the glyphs to this image file using the palette')
    parser.add_argument('--palette', default=DEFAULT_PALETTE,
                        help=f'Glyph palette atlas for image output (default: {DEFAULT_PALETTE})')
    parser.add_argument('--no-text', action='store_true', help='Do not write the text output')
    args = parser.parse_args(argv)

    if not os.path.exists(args.input_file):
        print(f"Error: File '{args.input_file}' not found")
        sys.exit(DecodeError.exit_code)
    if args.no_text and not args.image_out:
        parser.error("--no-text needs --image-out")

    try:
        run(args.input_file, args.scale, args.output, args.image_out, args.palette,
            write_text_output=not args.no_text)
    except GlyphArtError as e:
        print(f"Error: {e}")
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
