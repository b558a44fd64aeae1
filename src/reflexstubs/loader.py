from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from .errors import BinaryResolutionError
from .metadata import Binary, load_manifest
from .statics import MANIFEST_SUFFIX

ResolveHook = Callable[[str], Optional[Binary]]

def short_name(identity: str) -> str:
    '''
    First token of a binary identity.
    E.g., 'System.Runtime, Version=8.0.0.0' → 'System.Runtime'
    '''
    return identity.split(',', 1)[0].strip()

class BinaryLoader:
    '''
    Loads binary manifests and links each one to the binaries it references.

    References are looked up in the loaded cache first. Anything missing goes through
    the resolve hook, which by default scans the search paths, in the order they were
    added, for a manifest named after the reference's short name. There is exactly one
    hook slot: installing a hook replaces the previous one.
    '''

    def __init__(self, manifest_suffix: str = MANIFEST_SUFFIX) -> None:
        self.manifest_suffix = manifest_suffix
        self.target_names   : Set[str] = set()

        # Insertion ordered, dict used as a set
        self._search_paths  : Dict[Path, None] = {}
        self._binaries      : Dict[str, Binary] = {}
        self._resolve_hook  : Optional[ResolveHook] = None

    @property
    def search_paths(self) -> List[Path]:
        return list(self._search_paths)

    @property
    def binaries(self) -> List[Binary]:
        return list(self._binaries.values())

    @property
    def resolve_hook(self) -> Optional[ResolveHook]:
        return self._resolve_hook

    def install_resolve_hook(self, hook: Optional[ResolveHook] = None) -> None:
        self._resolve_hook = hook if hook is not None else self.resolve

    def add_search_path(self, path: Union[str, Path]) -> None:
        self._search_paths.setdefault(Path(path).resolve(), None)

    def add_search_paths(self, paths: Optional[Iterable[Union[str, Path]]]) -> None:
        for path in paths or ():
            self.add_search_path(path)

    def get(self, name: str) -> Optional[Binary]:
        return self._binaries.get(short_name(name))

    def load_target(self, path: Union[str, Path]) -> Binary:
        '''
        Load a binary the caller asked for explicitly. Its directory becomes a search
        path and its short name a target name.
        '''
        path = Path(path).resolve()
        self.add_search_path(path.parent)
        binary = self.load_from(path)
        self.target_names.add(binary.name)
        return binary

    def load_from(self, path: Union[str, Path], expected: Optional[str] = None) -> Binary:
        '''
        Load a manifest and resolve its references. A binary whose name is already
        loaded is returned from the cache and the file is not linked twice.

        When `expected` is given, a manifest declaring any other name is rejected before
        it reaches the cache.
        '''
        path = Path(path).resolve()
        binary = load_manifest(path)

        if expected is not None and binary.name != expected:
            raise BinaryResolutionError(
                f'Could not load binary \'{expected}\': {path} declares \'{binary.name}\' instead.'
            )

        cached = self._binaries.get(binary.name)
        if cached is not None:
            return cached

        # Cache before linking so reference cycles terminate
        self._binaries[binary.name] = binary
        for reference in binary.reference_names:
            binary.references.append(self.require(reference))

        return binary

    def require(self, identity: str) -> Binary:
        '''
        Return the loaded binary for `identity`, resolving it through the hook if needed.
        Resolution is attempted once; failure is fatal.
        '''
        name = short_name(identity)
        cached = self._binaries.get(name)
        if cached is not None:
            return cached

        resolved = self._resolve_hook(identity) if self._resolve_hook is not None else None
        if resolved is None:
            paths = ', '.join(str(p) for p in self._search_paths) or 'no search paths'
            raise BinaryResolutionError(f'Could not load binary \'{identity}\': not found in {paths}.')

        if resolved.name != name:
            raise BinaryResolutionError(
                f'Could not load binary \'{identity}\': {resolved.path} declares \'{resolved.name}\' instead.'
            )

        return resolved

    def resolve(self, identity: str) -> Optional[Binary]:
        name = short_name(identity)
        file_name = f'{name}{self.manifest_suffix}'

        for search_path in self._search_paths:
            candidate = search_path / file_name
            if candidate.is_file():
                return self.load_from(candidate, expected=name)

        return None
