from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple
import yaml

from .errors import ManifestFormatError, TypeResolutionError
from .statics import (
    ARRAY_SUFFIX,
    EXPORTED_VISIBILITY,
    NAMESPACE_SEPARATOR,
    VALID_TYPE_KINDS,
    VALID_VISIBILITIES,
    VOID_TYPE_NAME,
)

def split_full_name(full_name: str) -> Tuple[Optional[str], str]:
    '''
    Split a dotted full type name into (namespace, name).
    E.g., 'Acme.Widgets.Gadget' → ('Acme.Widgets', 'Gadget'), 'Gadget' → (None, 'Gadget')
    '''
    parts = full_name.rsplit(NAMESPACE_SEPARATOR, 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    else:
        return None, parts[0]

def join_full_name(namespace: Optional[str], name: str) -> str:
    return name if namespace is None else f'{namespace}{NAMESPACE_SEPARATOR}{name}'

class TypeDescriptor(ABC):
    '''
    A reflected type as seen by the generation engine.

    Identity is the triple (namespace, name, declaring binary name): two descriptors
    with the same triple are the same type, whichever object represents them.
    '''
    name        : str
    namespace   : Optional[str]

    @property
    @abstractmethod
    def unit_name(self) -> str:
        '''Short name of the binary declaring this type.'''

    @abstractmethod
    def referenced_types(self) -> Iterator['TypeDescriptor']:
        '''Yield every type this type's declaration refers to.'''

    @property
    def full_name(self) -> str:
        return join_full_name(self.namespace, self.name)

    @property
    def identity(self) -> Tuple[Optional[str], str, str]:
        return (self.namespace, self.name, self.unit_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.full_name} from {self.unit_name}>'

@dataclass(frozen=True)
class TypeRef:
    '''A reference to a named type, as written in a manifest.'''
    full_name   : str
    is_array    : bool = False

    @classmethod
    def parse(cls, text: Any) -> 'TypeRef':
        if not isinstance(text, str) or not text.strip():
            raise ManifestFormatError(f'Invalid type reference: {text!r}.')

        text = text.strip()
        is_array = text.endswith(ARRAY_SUFFIX)
        if is_array:
            text = text[:-len(ARRAY_SUFFIX)].strip()

        if not text or (is_array and text == VOID_TYPE_NAME):
            raise ManifestFormatError(f'Invalid type reference: {text!r}.')

        return cls(text, is_array)

    @property
    def is_void(self) -> bool:
        return self.full_name == VOID_TYPE_NAME

    def __str__(self) -> str:
        return f'{self.full_name}{ARRAY_SUFFIX}' if self.is_array else self.full_name

VOID = TypeRef(VOID_TYPE_NAME)

@dataclass(frozen=True)
class ParameterInfo:
    name    : str
    type    : TypeRef

@dataclass(frozen=True)
class FieldInfo:
    name        : str
    type        : TypeRef
    is_static   : bool = False

@dataclass(frozen=True)
class PropertyInfo:
    name        : str
    type        : TypeRef
    is_static   : bool = False
    is_readonly : bool = False

@dataclass(frozen=True)
class MethodInfo:
    name        : str
    returns     : TypeRef
    parameters  : Tuple[ParameterInfo, ...] = ()
    is_static   : bool = False

    def type_refs(self) -> Iterator[TypeRef]:
        yield self.returns
        for param in self.parameters:
            yield param.type

@dataclass(eq=False)
class ManifestType(TypeDescriptor):
    '''
    A type read from a binary manifest. References to other types are resolved
    lazily against the declaring binary and the binaries it references.
    '''
    name            : str
    namespace       : Optional[str]
    binary          : 'Binary' = field(repr=False)
    kind            : str = 'class'
    visibility      : str = EXPORTED_VISIBILITY
    base            : Optional[TypeRef] = None
    interfaces      : Tuple[TypeRef, ...] = ()
    values          : Tuple[str, ...] = ()
    fields          : Tuple[FieldInfo, ...] = ()
    properties      : Tuple[PropertyInfo, ...] = ()
    methods         : Tuple[MethodInfo, ...] = ()
    constructors    : Tuple[MethodInfo, ...] = ()
    invoke          : Optional[MethodInfo] = None

    @property
    def unit_name(self) -> str:
        return self.binary.name

    @property
    def is_exported(self) -> bool:
        return self.visibility == EXPORTED_VISIBILITY

    def type_refs(self) -> Iterator[TypeRef]:
        '''Yield every type reference in this type's declaration, in declaration order.'''
        if self.base:
            yield self.base
        yield from self.interfaces
        for fld in self.fields:
            yield fld.type
        for prop in self.properties:
            yield prop.type
        for method in (*self.constructors, *self.methods):
            yield from method.type_refs()
        if self.invoke:
            yield from self.invoke.type_refs()

    def resolve(self, ref: TypeRef) -> Optional['ManifestType']:
        '''
        Resolve a type reference from this type's point of view. Returns None for `void`.
        '''
        if ref.is_void:
            return None
        return self.binary.resolve_type(ref.full_name)

    def referenced_types(self) -> Iterator['ManifestType']:
        seen: Set[ManifestType] = set()
        for ref in self.type_refs():
            resolved = self.resolve(ref)
            if resolved is None or resolved in seen:
                continue
            seen.add(resolved)
            yield resolved

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'namespace': self.namespace,
            'kind': self.kind,
            'visibility': self.visibility,
            'base': str(self.base) if self.base else None,
            'interfaces': [str(ref) for ref in self.interfaces],
            'members': len(self.values) + len(self.fields) + len(self.properties) + len(self.methods),
        }

@dataclass(eq=False)
class Binary:
    '''
    A loaded unit: its exported types plus the binaries it was linked against.
    '''
    name            : str
    version         : str
    path            : Path
    reference_names : Tuple[str, ...] = ()
    types           : List[ManifestType] = field(default_factory=list)
    references      : List['Binary'] = field(default_factory=list, repr=False)

    @property
    def full_name(self) -> str:
        return f'{self.name}, Version={self.version}'

    def exported_types(self) -> List[ManifestType]:
        return [tp for tp in self.types if tp.is_exported]

    def find_type(self, full_name: str) -> Optional[ManifestType]:
        for tp in self.types:
            if tp.full_name == full_name:
                return tp
        return None

    def resolve_type(self, full_name: str) -> ManifestType:
        '''
        Find a type by full name in this binary, then breadth-first through its references.
        '''
        queue = deque([self])
        visited: Set[str] = set()

        while queue:
            current = queue.popleft()
            if current.name in visited:
                continue
            visited.add(current.name)

            found = current.find_type(full_name)
            if found is not None:
                return found

            queue.extend(current.references)

        raise TypeResolutionError(
            f'Type \'{full_name}\' referenced from \'{self.name}\' was not found in it or any binary it references.'
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version': self.version,
            'path': str(self.path),
            'references': list(self.reference_names),
            'types': [tp.to_dict() for tp in self.types],
        }

# ===--- Manifest parsing ---=== #

def _require(mapping: Dict[str, Any], key: str, where: str) -> Any:
    if key not in mapping or mapping[key] in (None, ''):
        raise ManifestFormatError(f'{where}: missing required key \'{key}\'.')
    return mapping[key]

def _as_list(value: Any, key: str, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestFormatError(f'{where}: \'{key}\' must be a list, not \'{type(value).__name__}\'.')
    return value

def _as_mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ManifestFormatError(f'{where}: expected a mapping, not \'{type(value).__name__}\'.')
    return value

def _as_name(value: Any, key: str, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ManifestFormatError(f'{where}: \'{key}\' must be a non-empty string.')
    return value.strip()

def _as_flag(mapping: Dict[str, Any], key: str, where: str) -> bool:
    value = mapping.get(key, False)
    if not isinstance(value, bool):
        raise ManifestFormatError(f'{where}: \'{key}\' must be a bool, not \'{type(value).__name__}\'.')
    return value

def _parse_method(data: Any, where: str, *, name: Optional[str] = None) -> MethodInfo:
    data = _as_mapping(data, where)
    method_name = name if name is not None else _as_name(_require(data, 'name', where), 'name', where)
    where = f'{where} \'{method_name}\''

    parameters = []
    for param in _as_list(data.get('parameters'), 'parameters', where):
        param = _as_mapping(param, where)
        parameters.append(ParameterInfo(
            _as_name(_require(param, 'name', where), 'name', where),
            TypeRef.parse(_require(param, 'type', where)),
        ))

    returns = TypeRef.parse(data['returns']) if data.get('returns') is not None else VOID
    return MethodInfo(method_name, returns, tuple(parameters), _as_flag(data, 'static', where))

def _parse_namespace(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None

    namespace = _as_name(value, 'namespace', where)
    if any(not segment for segment in namespace.split(NAMESPACE_SEPARATOR)):
        raise ManifestFormatError(f'{where}: invalid namespace \'{namespace}\'.')
    return namespace

def _parse_type(data: Any, binary: Binary, index: int) -> ManifestType:
    where = f'{binary.path}: types[{index}]'
    data = _as_mapping(data, where)

    name = _as_name(_require(data, 'name', where), 'name', where)
    if 'namespace' in data:
        namespace = _parse_namespace(data['namespace'], where)
    else:
        # Allow 'Acme.Widgets.Gadget' as a shorthand for name + namespace
        namespace, name = split_full_name(name)
    where = f'{binary.path}: type \'{join_full_name(namespace, name)}\''

    kind = data.get('kind', 'class')
    if kind not in VALID_TYPE_KINDS:
        raise ManifestFormatError(f'{where}: unknown kind \'{kind}\', expected one of {", ".join(VALID_TYPE_KINDS)}.')

    visibility = data.get('visibility', EXPORTED_VISIBILITY)
    if visibility not in VALID_VISIBILITIES:
        raise ManifestFormatError(f'{where}: unknown visibility \'{visibility}\'.')

    fields = []
    for fld in _as_list(data.get('fields'), 'fields', where):
        fld = _as_mapping(fld, where)
        fields.append(FieldInfo(
            _as_name(_require(fld, 'name', where), 'name', where),
            TypeRef.parse(_require(fld, 'type', where)),
            _as_flag(fld, 'static', where),
        ))

    properties = []
    for prop in _as_list(data.get('properties'), 'properties', where):
        prop = _as_mapping(prop, where)
        properties.append(PropertyInfo(
            _as_name(_require(prop, 'name', where), 'name', where),
            TypeRef.parse(_require(prop, 'type', where)),
            _as_flag(prop, 'static', where),
            _as_flag(prop, 'readonly', where),
        ))

    methods = [_parse_method(m, where) for m in _as_list(data.get('methods'), 'methods', where)]
    constructors = [
        _parse_method(c, where, name='__init__') for c in _as_list(data.get('constructors'), 'constructors', where)
    ]

    invoke = None
    if kind == 'delegate':
        invoke = _parse_method(data.get('invoke') or {}, where, name='__call__')

    values = [_as_name(v, 'values', where) for v in _as_list(data.get('values'), 'values', where)]
    if values and kind != 'enum':
        raise ManifestFormatError(f'{where}: only enums may declare values.')

    return ManifestType(
        name=name,
        namespace=namespace,
        binary=binary,
        kind=kind,
        visibility=visibility,
        base=TypeRef.parse(data['base']) if data.get('base') is not None else None,
        interfaces=tuple(TypeRef.parse(i) for i in _as_list(data.get('interfaces'), 'interfaces', where)),
        values=tuple(values),
        fields=tuple(fields),
        properties=tuple(properties),
        methods=tuple(methods),
        constructors=tuple(constructors),
        invoke=invoke,
    )

def parse_manifest(data: Any, path: Path) -> Binary:
    '''
    Build a `Binary` from an already decoded manifest document.

    References are recorded by name only; linking them to loaded binaries is the
    loader's job.
    '''
    where = str(path)
    data = _as_mapping(data, where)

    binary = Binary(
        name=_as_name(_require(data, 'name', where), 'name', where),
        version=str(data.get('version', '0.0.0')),
        path=path,
        reference_names=tuple(
            _as_name(ref, 'references', where) for ref in _as_list(data.get('references'), 'references', where)
        ),
    )

    seen: Set[str] = set()
    for index, type_data in enumerate(_as_list(data.get('types'), 'types', where)):
        tp = _parse_type(type_data, binary, index)
        if tp.full_name in seen:
            raise ManifestFormatError(f'{where}: type \'{tp.full_name}\' is declared more than once.')
        seen.add(tp.full_name)
        binary.types.append(tp)

    return binary

def load_manifest(path: Path) -> Binary:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ManifestFormatError(f'Could not read binary manifest \'{path}\': {e}') from e
    except yaml.YAMLError as e:
        raise ManifestFormatError(f'Binary manifest \'{path}\' is not valid YAML: {e}') from e

    return parse_manifest(data, path)
