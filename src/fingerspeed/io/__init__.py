from .video import FrameSource, VideoReader, VideoReaderConfig

__all__ = ["FrameSource", "VideoReader", "VideoReaderConfig"]
