class MandelsnapError(RuntimeError):
    """Base class for failures that end a run."""

class OutputDirectoryError(MandelsnapError):
    """The output directory could not be created."""

class ImageWriteError(MandelsnapError):
    """The rendered image could not be encoded or written."""
