from pathlib import Path
import pytest

from reflexstubs.errors import ReservedNamespaceError
from reflexstubs.paths import check_namespace, namespace_module, namespace_to_path

# ===========================
# |    namespace_to_path    |
# ===========================

def test_nested_namespace_maps_to_nested_directories():
    '''
    Verifies every namespace segment becomes one directory beneath the root.
    '''
    root = Path('out')
    assert namespace_to_path(root, 'Acme.Widgets.Parts') == root / 'Acme' / 'Widgets' / 'Parts'

def test_single_segment_namespace():
    assert namespace_to_path(Path('out'), 'System') == Path('out') / 'System'

def test_global_namespace_maps_to_reserved_directory():
    '''
    Ensures types without a namespace are placed in the reserved directory under the root.
    '''
    assert namespace_to_path(Path('out'), None) == Path('out') / 'global_'

@pytest.mark.parametrize('namespace', ['global_', 'global_.Widgets'])
def test_reserved_leading_segment_is_rejected(namespace):
    '''
    Checks that a real namespace starting with the reserved segment is a fatal error.
    '''
    with pytest.raises(ReservedNamespaceError, match='reserved'):
        namespace_to_path(Path('out'), namespace)

def test_reserved_token_elsewhere_is_allowed():
    '''
    Only the leading segment is reserved.
    '''
    assert namespace_to_path(Path('out'), 'Acme.global_') == Path('out') / 'Acme' / 'global_'
    assert namespace_to_path(Path('out'), 'global_x') == Path('out') / 'global_x'

# ===========================
# |     check_namespace     |
# ===========================

def test_check_namespace_accepts_none():
    check_namespace(None)

def test_check_namespace_rejects_reserved():
    with pytest.raises(ReservedNamespaceError):
        check_namespace('global_.Thing')

# ===========================
# |    namespace_module     |
# ===========================

def test_namespace_module():
    assert namespace_module(None) == 'global_'
    assert namespace_module('Acme.Core') == 'Acme.Core'
