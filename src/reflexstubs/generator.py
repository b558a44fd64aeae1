from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union
import click

from .config import StubOptions
from .loader import BinaryLoader
from .metadata import Binary, TypeDescriptor
from .paths import check_namespace, namespace_module, namespace_to_path
from .registry import DependencyRegistry, Namespace
from .renderer import StubRenderer

PathLike = Union[str, Path]

@dataclass
class StubFileInfo:
    namespace   : Namespace
    path        : Path
    types       : List[str]
    emissions   : int = 1
    added       : List[str] = field(default_factory=list)

    @property
    def module(self) -> str:
        return namespace_module(self.namespace)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'namespace': self.module,
            'path': str(self.path),
            'types': list(self.types),
            'emissions': self.emissions,
            'added': list(self.added),
        }

@dataclass
class GenerationResult:
    dest_path   : Path
    targets     : List[str]
    files       : Dict[Namespace, StubFileInfo] = field(default_factory=dict)
    skipped     : List[Namespace] = field(default_factory=list)

    @property
    def n_types(self) -> int:
        return sum(len(info.types) for info in self.files.values())

    def sorted_files(self) -> List[StubFileInfo]:
        return sorted(self.files.values(), key=lambda info: str(info.path))

    def record(
            self,
            namespace   : Namespace,
            path        : Path,
            types       : Sequence[TypeDescriptor],
            added       : AbstractSet[TypeDescriptor],
        ) -> None:
        names = [tp.name for tp in types]
        previous = self.files.get(namespace)
        emissions = previous.emissions + 1 if previous else 1
        new_names = [tp.name for tp in types if tp in added]
        self.files[namespace] = StubFileInfo(namespace, path, names, emissions, new_names)

        if namespace in self.skipped:
            self.skipped.remove(namespace)

    def skip(self, namespace: Namespace) -> None:
        if namespace not in self.files and namespace not in self.skipped:
            self.skipped.append(namespace)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'destination': str(self.dest_path),
            'targets': sorted(self.targets),
            'files': [info.to_dict() for info in self.sorted_files()],
            'skipped': sorted(namespace_module(ns) for ns in self.skipped),
        }

class GenerationSession:
    '''
    State of one generation session: the binary loader, the dependency registry and
    the renderer feeding it.

    A session can run `build_stubs` more than once. Loaded binaries and target names are
    kept and the resolve hook is reinstalled, not added, on every run. The registry starts
    empty on each run so every stub tree is closed on its own. Sessions are not thread safe; use one
    per concurrent generation.
    '''

    def __init__(self, options: Optional[StubOptions] = None) -> None:
        self.options = options if options is not None else StubOptions()
        self.loader = BinaryLoader(manifest_suffix=self.options.manifest_suffix)
        self.registry = DependencyRegistry()
        self.renderer = StubRenderer(self.registry)

    @property
    def target_names(self) -> List[str]:
        return sorted(self.loader.target_names)

    def echo(self, message: str) -> None:
        if not self.options.quiet:
            click.echo(message)

    def prepare_resolver(self, search_paths: Optional[Iterable[PathLike]] = None) -> None:
        self.loader.install_resolve_hook()
        self.loader.add_search_paths(search_paths)

    def register_binary(self, binary: Binary) -> int:
        '''Register every exported type of `binary`. Returns the number of new types.'''
        return sum(self.registry.add_dependency(tp) for tp in binary.exported_types())

    def load_targets(self, target_paths: Iterable[PathLike]) -> List[Binary]:
        binaries = []
        for path in target_paths:
            binary = self.loader.load_target(path)
            self.echo('Generating Binary: {}'.format(click.style(binary.full_name, fg='green', bold=True)))
            self.register_binary(binary)
            binaries.append(binary)
        return binaries

    def load_builtins(self, names: Iterable[str]) -> List[Binary]:
        binaries = []
        for name in names:
            binary = self.loader.require(name)
            self.echo('Generating Built-in Binary: {}'.format(click.style(binary.full_name, fg='cyan', bold=True)))
            self.register_binary(binary)
            binaries.append(binary)
        return binaries

    def select_types(self, types: Iterable[TypeDescriptor]) -> List[TypeDescriptor]:
        '''
        Apply target-only filtering, then order by name. Declaring binary breaks ties
        between identically named types.
        '''
        if self.options.only_target_types:
            targets = self.loader.target_names
            types = [tp for tp in types if tp.unit_name in targets]
        return sorted(types, key=lambda tp: (tp.name, tp.unit_name))

    def write_stub(
            self,
            dest_path   : Path,
            namespace   : Namespace,
            types       : Sequence[TypeDescriptor],
        ) -> Tuple[Path, FrozenSet[TypeDescriptor]]:
        '''
        Write the stub of `namespace`. Returns its path and the members added since the
        namespace was last written.
        '''
        directory = namespace_to_path(dest_path, namespace)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.options.stub_file_name

        # Reset before rendering so types found while rendering queue this namespace again
        added = self.registry.clear_current(namespace)

        stub_text = self.renderer.render(namespace, types)
        path.write_text(stub_text, encoding='utf-8')
        return path, added

    def generate(self, dest_path: PathLike) -> GenerationResult:
        '''
        Drain the worklist, writing one stub file per namespace, until no namespace is left.
        '''
        dest_path = Path(dest_path)
        result = GenerationResult(dest_path, self.target_names)

        for namespace in self.registry.namespaces:
            check_namespace(namespace)

        while (dirty := self.registry.remove_dirty_namespace()) is not None:
            namespace, members = dirty
            check_namespace(namespace)

            types = self.select_types(members)
            if not types:
                result.skip(namespace)
                continue

            path, added = self.write_stub(dest_path, namespace, types)
            result.record(namespace, path, types, added)
            self.echo('  {} {}'.format(click.style(namespace_module(namespace), fg='yellow'), click.style(str(path), fg='black')))

        return result

def build_stubs(
        dest_path           : PathLike,
        target_paths        : Iterable[PathLike],
        search_paths        : Optional[Iterable[PathLike]] = None,
        only_target_types   : Optional[bool] = None,
        *,
        options             : Optional[StubOptions] = None,
        session             : Optional[GenerationSession] = None,
    ) -> GenerationResult:
    '''
    Generate stubs for the target binaries and everything their public types refer to.

    Parameters
    ----------
    dest_path : PathLike
        Root directory of the generated stub tree.
    target_paths : Iterable[PathLike]
        Manifests of the binaries to generate stubs for.
    search_paths : Optional[Iterable[PathLike]]
        Extra directories searched when resolving referenced binaries. The directory of
        every target is always searched.
    only_target_types : Optional[bool]
        Only write types declared by the targets. Overrides `options` when given.
    options : Optional[StubOptions]
        Generation options. Ignored when `session` is given, except for `only_target_types`.
    session : Optional[GenerationSession]
        Session to reuse. A fresh one is created when omitted.

    Returns
    -------
    GenerationResult
        The stub files written and the namespaces skipped by filtering.
    '''
    if session is None:
        session = GenerationSession(options)

    if only_target_types is not None:
        session.options = session.options.merged(only_target_types=only_target_types)

    session.registry.reset()
    session.prepare_resolver(search_paths)
    session.load_targets(target_paths)
    session.load_builtins(session.options.builtin_binaries)

    return session.generate(dest_path)
