class TagError(RuntimeError):
    """Base error for tagfixer.id3."""


class MalformedTagError(TagError):
    """Tag bytes do not follow the expected layout."""


class TruncatedDataError(MalformedTagError):
    """A read ran past the end of the buffer."""


class TagWriteError(TagError):
    """The replacement tag could not be built."""
