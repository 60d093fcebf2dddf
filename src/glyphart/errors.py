# Exit status 2 is left to argparse usage errors.
class GlyphArtError(Exception):
    exit_code = 1


class DecodeError(GlyphArtError):
    exit_code = 1


class PaletteDecodeError(GlyphArtError):
    exit_code = 3


class InvalidScalar(GlyphArtError, ValueError):
    exit_code = 4


class EncodeError(GlyphArtError):
    exit_code = 5
