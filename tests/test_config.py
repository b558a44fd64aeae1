from pathlib import Path
import pytest

from reflexstubs.config import StubOptions
from reflexstubs.errors import ReflexstubsConfigurationError

# ===========================
# |       StubOptions       |
# ===========================

def test_defaults():
    options = StubOptions()

    assert options.only_target_types is False
    assert options.builtin_binaries == ()
    assert options.stub_file_name == '__init__.pyi'
    assert options.manifest_suffix == '.yaml'
    assert options.quiet is False

def test_unknown_option_suggests_closest_name():
    '''
    Ensures a misspelled option is rejected with a suggestion for the intended name.
    '''
    with pytest.raises(ReflexstubsConfigurationError, match='Did you mean \'only_target_types\''):
        StubOptions(only_target_type=True)

def test_unknown_option_without_suggestion():
    with pytest.raises(ReflexstubsConfigurationError) as e:
        StubOptions(zzz=1)
    assert 'Did you mean' not in str(e.value)

@pytest.mark.parametrize('kwargs', [
    {'only_target_types': 'yes'},
    {'quiet': 1},
    {'builtin_binaries': [1, 2]},
    {'stub_file_name': ''},
    {'stub_file_name': 'sub/__init__.pyi'},
    {'manifest_suffix': 'yaml'},
])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ReflexstubsConfigurationError):
        StubOptions(**kwargs)

def test_single_builtin_name_becomes_tuple():
    assert StubOptions(builtin_binaries='System.Runtime').builtin_binaries == ('System.Runtime', )

def test_contains():
    assert 'quiet' in StubOptions()
    assert 'verbose' not in StubOptions()

def test_merged_ignores_none():
    '''
    Verifies merged() applies only the overrides that were actually given.
    '''
    options = StubOptions(only_target_types=True)
    merged = options.merged(only_target_types=None, quiet=True)

    assert merged.only_target_types is True
    assert merged.quiet is True
    assert options.quiet is False

# ===========================
# |        from_file        |
# ===========================

def test_from_file_accepts_dashed_keys(tmp_path: Path):
    path = tmp_path / 'reflexstubs.yaml'
    path.write_text('only-target-types: true\nbuiltin-binaries:\n  - System.Runtime\n', encoding='utf-8')

    options = StubOptions.from_file(path)

    assert options == StubOptions(only_target_types=True, builtin_binaries=('System.Runtime', ))

def test_from_empty_file(tmp_path: Path):
    path = tmp_path / 'reflexstubs.yaml'
    path.write_text('', encoding='utf-8')

    assert StubOptions.from_file(path) == StubOptions()

def test_from_file_requires_mapping(tmp_path: Path):
    path = tmp_path / 'reflexstubs.yaml'
    path.write_text('- quiet\n', encoding='utf-8')

    with pytest.raises(ReflexstubsConfigurationError, match='must contain a mapping'):
        StubOptions.from_file(path)

def test_from_missing_file(tmp_path: Path):
    with pytest.raises(ReflexstubsConfigurationError, match='Could not read'):
        StubOptions.from_file(tmp_path / 'missing.yaml')
