from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Set
import textwrap

from .metadata import ManifestType, MethodInfo, TypeRef
from .paths import namespace_module
from .registry import DependencyRegistry
from .statics import RESERVED_IDENTIFIERS

INDENT = ' ' * 4

def stub_identifier(name: str) -> str:
    '''Names that are Python keywords get a trailing underscore.'''
    return f'{name}_' if name in RESERVED_IDENTIFIERS else name

def stub_render_imports(collected_types: Dict[str, Set[str]]) -> str:
    '''
    Render `from module import A, B` lines, modules and names sorted alphabetically.
    '''
    lines = []
    for module in sorted(collected_types):
        names = ', '.join(sorted(collected_types[module]))
        lines.append(f'from {module} import {names}')
    return '\n'.join(lines)

class StubRenderer:
    '''
    Renders the `.pyi` text of one namespace.

    Every type referenced by a rendered declaration is registered with the registry,
    so its own namespace gets queued for generation. References to types outside the
    namespace being rendered are imported from that type's namespace module.
    '''

    def __init__(self, registry: DependencyRegistry) -> None:
        self.registry = registry

    def render(self, namespace: Optional[str], types: Sequence[ManifestType]) -> str:
        collected_types: Dict[str, Set[str]] = {}
        blocks = [self._render_type(tp, namespace, collected_types) for tp in types]

        header = f'# Stubs for namespace \'{namespace_module(namespace)}\''
        parts = [header]
        imports = stub_render_imports(collected_types)
        if imports:
            parts.append(imports)
        parts.extend(blocks)

        return '\n\n'.join(parts) + '\n'

    def _reference(
            self,
            owner           : ManifestType,
            ref             : TypeRef,
            namespace       : Optional[str],
            collected_types : Dict[str, Set[str]],
        ) -> str:
        resolved = owner.resolve(ref)
        if resolved is None:
            return 'None'

        self.registry.add_dependency(resolved)

        name = stub_identifier(resolved.name)
        if resolved.namespace != namespace:
            collected_types.setdefault(namespace_module(resolved.namespace), set()).add(name)

        return f'list[{name}]' if ref.is_array else name

    def _render_method(
            self,
            owner           : ManifestType,
            method          : MethodInfo,
            namespace       : Optional[str],
            collected_types : Dict[str, Set[str]],
            *,
            overloaded      : bool,
        ) -> List[str]:
        lines = []
        if overloaded:
            collected_types.setdefault('typing', set()).add('overload')
            lines.append('@overload')
        if method.is_static:
            lines.append('@staticmethod')

        params = [] if method.is_static else ['self']
        for param in method.parameters:
            annotation = self._reference(owner, param.type, namespace, collected_types)
            params.append(f'{stub_identifier(param.name)}: {annotation}')

        returns = self._reference(owner, method.returns, namespace, collected_types)
        name = method.name if method.name.startswith('__') else stub_identifier(method.name)
        lines.append(f'def {name}({", ".join(params)}) -> {returns}: ...')
        return lines

    def _render_methods(
            self,
            owner           : ManifestType,
            methods         : Iterable[MethodInfo],
            namespace       : Optional[str],
            collected_types : Dict[str, Set[str]],
        ) -> List[str]:
        methods = list(methods)
        counts = Counter(method.name for method in methods)
        lines: List[str] = []
        for method in methods:
            lines.extend(self._render_method(
                owner, method, namespace, collected_types, overloaded=counts[method.name] > 1
            ))
        return lines

    def _render_type(
            self,
            tp              : ManifestType,
            namespace       : Optional[str],
            collected_types : Dict[str, Set[str]],
        ) -> str:
        bases = []
        if tp.base is not None:
            bases.append(self._reference(tp, tp.base, namespace, collected_types))
        for interface in tp.interfaces:
            bases.append(self._reference(tp, interface, namespace, collected_types))

        name = stub_identifier(tp.name)
        declaration = f'class {name}({", ".join(bases)}):' if bases else f'class {name}:'

        body: List[str] = []

        for value in tp.values:
            body.append(f'{stub_identifier(value)}: {name}')

        for fld in tp.fields:
            annotation = self._reference(tp, fld.type, namespace, collected_types)
            if fld.is_static:
                collected_types.setdefault('typing', set()).add('ClassVar')
                annotation = f'ClassVar[{annotation}]'
            body.append(f'{stub_identifier(fld.name)}: {annotation}')

        for prop in tp.properties:
            annotation = self._reference(tp, prop.type, namespace, collected_types)
            if prop.is_static:
                collected_types.setdefault('typing', set()).add('ClassVar')
                body.append(f'{stub_identifier(prop.name)}: ClassVar[{annotation}]')
            elif prop.is_readonly:
                body.append('@property')
                body.append(f'def {stub_identifier(prop.name)}(self) -> {annotation}: ...')
            else:
                body.append(f'{stub_identifier(prop.name)}: {annotation}')

        body.extend(self._render_methods(tp, tp.constructors, namespace, collected_types))
        body.extend(self._render_methods(tp, tp.methods, namespace, collected_types))

        if tp.invoke is not None:
            body.extend(self._render_method(tp, tp.invoke, namespace, collected_types, overloaded=False))

        if not body:
            return f'{declaration} ...'

        return '\n'.join([declaration, textwrap.indent('\n'.join(body), INDENT)])
