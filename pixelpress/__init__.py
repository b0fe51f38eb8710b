"""Pixelpress - resize images to pixel bounds or a byte budget."""

__version__ = "0.1.0"
