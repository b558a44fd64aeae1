__version__ = '0.1.0'
__version_short__ = '0.1'

from .config import StubOptions
from .generator import (
    GenerationResult,
    GenerationSession,
    StubFileInfo,
    build_stubs,
)
from .loader import BinaryLoader
from .metadata import (
    Binary,
    ManifestType,
    TypeDescriptor,
    load_manifest,
)
from .paths import namespace_to_path
from .registry import DependencyRegistry, DirtyNamespace
from .renderer import StubRenderer
from .errors import (
    ReflexstubsError,
    BinaryResolutionError,
    ManifestFormatError,
    TypeResolutionError,
    ReservedNamespaceError,
    ReflexstubsConfigurationError,
)

__all__ = [
    # Generation
    "build_stubs",
    "GenerationSession",
    "GenerationResult",
    "StubFileInfo",
    "StubOptions",

    # Engine parts
    "BinaryLoader",
    "DependencyRegistry",
    "DirtyNamespace",
    "StubRenderer",
    "namespace_to_path",

    # Metadata
    "Binary",
    "ManifestType",
    "TypeDescriptor",
    "load_manifest",

    # Exceptions
    "ReflexstubsError",
    "BinaryResolutionError",
    "ManifestFormatError",
    "TypeResolutionError",
    "ReservedNamespaceError",
    "ReflexstubsConfigurationError",
]
