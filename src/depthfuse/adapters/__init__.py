"""Adapters for the external image decoder and volume container writer."""

from .view_image_loader import ViewImageLoader
from .volume_writer import VolumeWriter

__all__ = ["ViewImageLoader", "VolumeWriter"]
