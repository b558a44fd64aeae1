class ReflexstubsError(Exception):
    """Base class for all stub generation errors."""
    pass

class BinaryResolutionError(ReflexstubsError):
    """Raised when a referenced binary cannot be found in any search path."""
    pass

class ManifestFormatError(ReflexstubsError):
    """Raised when a binary manifest is unreadable or structurally invalid."""
    pass

class TypeResolutionError(ReflexstubsError):
    """Raised when a type reference names no type in the loaded binaries."""
    pass

class ReservedNamespaceError(ReflexstubsError):
    """Raised when a namespace collides with the reserved global namespace directory."""
    pass

class ReflexstubsConfigurationError(ReflexstubsError):
    """Raised when generation options are invalid."""
    pass
