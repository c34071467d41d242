"""treecat: print path and content of all files in a tree."""

__version__ = "0.1.0"


class TreecatError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments such as a malformed output format,
    an unknown preset, or a bad worker count. The message is printed
    to stderr and the process exits with code 1.
    """
