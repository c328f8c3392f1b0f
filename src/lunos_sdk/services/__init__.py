"""Capability services built on the request pipeline."""

from .audio import AudioService
from .chat import ChatService
from .embedding import EmbeddingService
from .image import ImageService
from .model_catalog import ModelService
from .video import VideoService

__all__ = ["AudioService", "ChatService", "EmbeddingService", "ImageService", "ModelService", "VideoService"]
