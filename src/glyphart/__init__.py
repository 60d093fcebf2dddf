"""Edge-aware ASCII art from raster images, as text or as a glyph-tiled image."""

__version__ = "0.1.0"

from .ascii_converter import convert, image_to_glyphs, load_image, render_text
from .ascii_recorder import create_palette_atlas, load_palette, render_palette
from .errors import DecodeError, EncodeError, GlyphArtError, InvalidScalar, PaletteDecodeError

__all__ = [
    "convert",
    "image_to_glyphs",
    "load_image",
    "render_text",
    "create_palette_atlas",
    "load_palette",
    "render_palette",
    "DecodeError",
    "EncodeError",
    "GlyphArtError",
    "InvalidScalar",
    "PaletteDecodeError",
]
