from pathlib import Path
from typing import Any, Callable, Dict, Optional
import pytest
import yaml

from reflexstubs import GenerationSession, StubOptions

BINARIES_DIR = Path(__file__).resolve().parent / 'test_binaries'

@pytest.fixture
def binaries_dir() -> Path:
    return BINARIES_DIR

@pytest.fixture
def quiet_session() -> Callable[..., GenerationSession]:
    def _quiet_session(**options: Any) -> GenerationSession:
        return GenerationSession(StubOptions(quiet=True, **options))

    return _quiet_session

@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    '''
    Write a manifest named after its binary into `directory` (defaults to tmp_path/bin).
    '''
    def _write_manifest(data: Dict[str, Any], directory: Optional[Path] = None) -> Path:
        directory = directory or tmp_path / 'bin'
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f'{data["name"]}.yaml'
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding='utf-8')
        return path

    return _write_manifest

@pytest.fixture
def runtime_manifest(write_manifest: Callable[..., Path]) -> Path:
    '''A tiny runtime library: System.Object and System.String referencing each other.'''
    return write_manifest({
        'name': 'System.Runtime',
        'version': '8.0.0',
        'types': [
            {'name': 'Object', 'namespace': 'System', 'methods': [{'name': 'ToString', 'returns': 'System.String'}]},
            {'name': 'String', 'namespace': 'System', 'base': 'System.Object'},
            {'name': 'Guid', 'namespace': 'System', 'kind': 'struct'},
        ],
    })
