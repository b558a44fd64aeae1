from pathlib import Path
from typing import List
import shutil
import pytest

from reflexstubs.errors import BinaryResolutionError
from reflexstubs.loader import BinaryLoader, short_name

# ===========================
# |       short_name        |
# ===========================

def test_short_name_takes_first_token():
    assert short_name('System.Runtime, Version=8.0.0.0, Culture=neutral') == 'System.Runtime'
    assert short_name('Acme.Core') == 'Acme.Core'

# ===========================
# |       load_target       |
# ===========================

def test_load_target_records_search_path_and_target(binaries_dir: Path):
    '''
    Verifies a target's directory becomes a search path and its name a target name,
    while binaries loaded as references are not targets.
    '''
    loader = BinaryLoader()
    loader.install_resolve_hook()
    binary = loader.load_target(binaries_dir / 'Acme.Widgets.yaml')

    assert binary.name == 'Acme.Widgets'
    assert loader.search_paths == [binaries_dir.resolve()]
    assert loader.target_names == {'Acme.Widgets'}
    assert sorted(b.name for b in loader.binaries) == ['Acme.Core', 'Acme.Widgets', 'System.Runtime']

def test_references_are_linked(binaries_dir: Path):
    loader = BinaryLoader()
    loader.install_resolve_hook()
    binary = loader.load_target(binaries_dir / 'Acme.Widgets.yaml')

    assert [ref.name for ref in binary.references] == ['System.Runtime', 'Acme.Core']
    assert binary.references[1].references == [loader.get('System.Runtime')]

def test_binary_loaded_once(binaries_dir: Path):
    '''
    Ensures a binary reached as a reference and later requested as a target is the
    same object, loaded once.
    '''
    loader = BinaryLoader()
    loader.install_resolve_hook()
    loader.load_target(binaries_dir / 'Acme.Widgets.yaml')
    core = loader.get('Acme.Core')

    assert loader.load_target(binaries_dir / 'Acme.Core.yaml') is core
    assert loader.target_names == {'Acme.Widgets', 'Acme.Core'}

def test_extra_search_paths_are_used(binaries_dir: Path, tmp_path: Path):
    '''
    Checks that a reference missing from the target's directory is found in an extra
    search path.
    '''
    target_dir = tmp_path / 'target'
    target_dir.mkdir()
    shutil.copy(binaries_dir / 'Acme.Extras.yaml', target_dir)

    loader = BinaryLoader()
    loader.install_resolve_hook()
    loader.add_search_paths([binaries_dir])
    binary = loader.load_target(target_dir / 'Acme.Extras.yaml')

    assert binary.references[0].path == (binaries_dir / 'System.Runtime.yaml').resolve()

def test_search_paths_are_scanned_in_order(binaries_dir: Path, tmp_path: Path):
    '''
    Verifies the first search path holding a matching manifest wins.
    '''
    first = tmp_path / 'first'
    second = tmp_path / 'second'
    for directory in (first, second):
        directory.mkdir()
        shutil.copy(binaries_dir / 'System.Runtime.yaml', directory)

    loader = BinaryLoader()
    loader.install_resolve_hook()
    loader.add_search_paths([first, second])

    assert loader.require('System.Runtime').path == (first / 'System.Runtime.yaml').resolve()

# ===========================
# |       resolution        |
# ===========================

def test_missing_reference_is_fatal(write_manifest):
    '''
    Ensures an unresolvable reference aborts the load with BinaryResolutionError.
    '''
    path = write_manifest({'name': 'Acme.Orphan', 'references': ['Missing.Library, Version=1.0']})
    loader = BinaryLoader()
    loader.install_resolve_hook()

    with pytest.raises(BinaryResolutionError, match='Missing.Library'):
        loader.load_target(path)

def test_no_hook_means_no_resolution(binaries_dir: Path):
    '''
    Without an installed hook nothing outside the cache can be resolved.
    '''
    loader = BinaryLoader()
    loader.add_search_paths([binaries_dir])

    with pytest.raises(BinaryResolutionError):
        loader.require('System.Runtime')

def test_manifest_name_mismatch_is_fatal(write_manifest, tmp_path: Path):
    '''
    Checks that a manifest found under the requested name but declaring another binary
    is rejected.
    '''
    directory = tmp_path / 'bin'
    write_manifest({'name': 'Acme.Real'})
    (directory / 'Acme.Real.yaml').rename(directory / 'Acme.Alias.yaml')

    loader = BinaryLoader()
    loader.install_resolve_hook()
    loader.add_search_paths([directory])

    with pytest.raises(BinaryResolutionError, match='declares \'Acme.Real\''):
        loader.require('Acme.Alias')

    # The mismatched manifest must not stay cached under its declared name
    assert loader.get('Acme.Real') is None
    assert loader.binaries == []

def test_resolve_hook_is_replaced_not_stacked(write_manifest):
    '''
    Verifies installing a hook twice leaves a single hook, so a failed resolution calls
    it exactly once and is not retried.
    '''
    calls: List[str] = []

    def hook(identity: str):
        calls.append(identity)
        return None

    loader = BinaryLoader()
    loader.install_resolve_hook(hook)
    loader.install_resolve_hook(hook)

    with pytest.raises(BinaryResolutionError):
        loader.require('Missing.Library')

    assert calls == ['Missing.Library']
    assert loader.resolve_hook is hook

def test_default_hook_is_the_search_path_scan():
    loader = BinaryLoader()
    loader.install_resolve_hook()
    assert loader.resolve_hook == loader.resolve

def test_reference_cycles_terminate(write_manifest):
    '''
    Ensures two binaries referencing each other load without recursing forever.
    '''
    write_manifest({'name': 'Acme.Left', 'references': ['Acme.Right']})
    right = write_manifest({'name': 'Acme.Right', 'references': ['Acme.Left']})

    loader = BinaryLoader()
    loader.install_resolve_hook()
    binary = loader.load_target(right)

    left = binary.references[0]
    assert left.name == 'Acme.Left'
    assert left.references == [binary]

def test_custom_manifest_suffix(binaries_dir: Path, tmp_path: Path):
    shutil.copy(binaries_dir / 'System.Runtime.yaml', tmp_path / 'System.Runtime.meta')

    loader = BinaryLoader(manifest_suffix='.meta')
    loader.install_resolve_hook()
    loader.add_search_path(tmp_path)

    assert loader.require('System.Runtime').name == 'System.Runtime'
