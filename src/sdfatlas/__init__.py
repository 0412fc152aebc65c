"""sdfatlas - Generate signed distance field font atlases.

sdfatlas converts TrueType/OpenType fonts into BMFont-compatible texture
atlases of signed distance field glyph images (msdf, sdf or psdf) plus a
font descriptor file with glyph placement, metrics and kerning.

Example:
    $ sdfatlas Roboto-Regular.ttf --field-type msdf --texture-size 512,512

This will create Roboto-Regular.png and Roboto-Regular.fnt next to the font.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
