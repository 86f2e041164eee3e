"""
Exception hierarchy for the MoodMash engine.
"""


class MoodMashError(Exception):
    """Base class for engine errors."""
    pass


class ModelImportError(MoodMashError, ValueError):
    """Raised when exported model data is malformed or does not fit the network shape."""
    pass
