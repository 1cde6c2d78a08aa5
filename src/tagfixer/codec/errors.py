class CodecError(RuntimeError):
    """ffmpeg could not produce the requested output for one input."""
