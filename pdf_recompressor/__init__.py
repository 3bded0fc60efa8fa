"""
PDF Recompressor - pull embedded images out of a PDF, recompress them as
lower-quality JPEGs and rebuild a one-image-per-page PDF.
"""

__version__ = "1.0.0"
__author__ = "PDF Recompressor"
