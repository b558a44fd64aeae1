from pathlib import Path
from typing import Optional

from .errors import ReservedNamespaceError
from .statics import GLOBAL_NAMESPACE_DIR, NAMESPACE_SEPARATOR

def check_namespace(namespace: Optional[str]) -> None:
    '''
    Raise `ReservedNamespaceError` if a real namespace starts with the segment reserved
    for types outside any namespace.
    '''
    if namespace is None:
        return

    if namespace.split(NAMESPACE_SEPARATOR, 1)[0] == GLOBAL_NAMESPACE_DIR:
        raise ReservedNamespaceError(f'The namespace \'{GLOBAL_NAMESPACE_DIR}\' is reserved (found \'{namespace}\').')

def namespace_to_path(root: Path, namespace: Optional[str]) -> Path:
    '''
    Map a namespace to its directory beneath `root`.
    E.g., 'Acme.Widgets' → root/Acme/Widgets, None → root/global_
    '''
    if namespace is None:
        return root / GLOBAL_NAMESPACE_DIR

    check_namespace(namespace)
    return root.joinpath(*namespace.split(NAMESPACE_SEPARATOR))

def namespace_module(namespace: Optional[str]) -> str:
    '''Module name the stubs of `namespace` are importable as.'''
    return GLOBAL_NAMESPACE_DIR if namespace is None else namespace
