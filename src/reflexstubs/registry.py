from collections import deque
from typing import Deque, Dict, FrozenSet, List, NamedTuple, Optional, Set

from .metadata import TypeDescriptor

Namespace = Optional[str]

class DirtyNamespace(NamedTuple):
    namespace   : Namespace
    types       : FrozenSet[TypeDescriptor]

class DependencyRegistry:
    '''
    Namespace membership of every type discovered so far, plus the worklist of
    namespaces that still have to be written.

    The worklist is the frontier of the closure over type references: rendering a
    namespace registers the types it refers to, which queues their namespaces in turn.
    Generation is done when `remove_dirty_namespace` returns None.

    A namespace is queued only when it gains a member it did not have before, so adding
    an already known type is a no-op. Each namespace also keeps the members added since
    it was last emitted; `clear_current` hands that buffer over when the namespace is
    written, and anything registered afterwards queues the namespace again.
    '''

    def __init__(self) -> None:
        self._members       : Dict[Namespace, Set[TypeDescriptor]] = {}
        self._pending       : Dict[Namespace, Set[TypeDescriptor]] = {}
        self._dirty_queue   : Deque[Namespace] = deque()
        self._dirty_set     : Set[Namespace] = set()

    def __len__(self) -> int:
        return sum(len(members) for members in self._members.values())

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, TypeDescriptor):
            return False
        return item in self._members.get(item.namespace, ())

    @property
    def namespaces(self) -> List[Namespace]:
        return list(self._members)

    @property
    def dirty(self) -> List[Namespace]:
        return list(self._dirty_queue)

    @property
    def is_drained(self) -> bool:
        return not self._dirty_queue

    def members(self, namespace: Namespace) -> FrozenSet[TypeDescriptor]:
        return frozenset(self._members.get(namespace, ()))

    def pending(self, namespace: Namespace) -> FrozenSet[TypeDescriptor]:
        return frozenset(self._pending.get(namespace, ()))

    def add_dependency(self, type_: TypeDescriptor) -> bool:
        '''
        Register `type_` under its namespace. Returns True if it was not known before,
        in which case its namespace is queued.
        '''
        members = self._members.setdefault(type_.namespace, set())
        if type_ in members:
            return False

        members.add(type_)
        self._pending.setdefault(type_.namespace, set()).add(type_)
        self._mark_dirty(type_.namespace)
        return True

    def remove_dirty_namespace(self) -> Optional[DirtyNamespace]:
        '''
        Pop the oldest queued namespace with its full current membership, or None
        once the worklist is empty.
        '''
        if not self._dirty_queue:
            return None

        namespace = self._dirty_queue.popleft()
        self._dirty_set.discard(namespace)
        return DirtyNamespace(namespace, frozenset(self._members[namespace]))

    def clear_current(self, namespace: Namespace) -> FrozenSet[TypeDescriptor]:
        '''
        Start a fresh accumulation cycle for `namespace`. Returns the members added since
        the previous cycle.
        '''
        return frozenset(self._pending.pop(namespace, ()))

    def reset(self) -> None:
        '''Forget every member and queued namespace, as at the start of a new run.'''
        self._members.clear()
        self._pending.clear()
        self._dirty_queue.clear()
        self._dirty_set.clear()

    def _mark_dirty(self, namespace: Namespace) -> None:
        if namespace in self._dirty_set:
            return
        self._dirty_set.add(namespace)
        self._dirty_queue.append(namespace)
