"""Fixed glyph tables for glyph-art conversion."""

CHAR_SETS = {
    'standard': {
        'chars': " .:-=+*#%@",
        'name': 'Standard ASCII'
    },
    'edges': {
        'chars': "-\\|/",
        'name': 'Edge Directions'
    },
}

RAMP = CHAR_SETS['standard']['chars']

# Glyph indices at or above EDGE_BASE select an edge direction, in this order.
EDGE_BASE = 10
EDGE_HORIZONTAL = 0
EDGE_BACKSLASH = 1
EDGE_VERTICAL = 2
EDGE_SLASH = 3
EDGE_CHARS = CHAR_SETS['edges']['chars']

# Atlas tile order: the ramp, then the edge glyphs starting at EDGE_BASE.
PALETTE_CHARS = RAMP + EDGE_CHARS
TILE_SIZE = 8
DEFAULT_PALETTE = 'palette.png'


def glyph_text(index):
    if index >= EDGE_BASE:
        return EDGE_CHARS[index - EDGE_BASE] * 2
    return RAMP[index] * 2
