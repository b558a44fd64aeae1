from pathlib import Path
from typing import Any, Dict, Tuple, Union
import difflib
import yaml

from .errors import ReflexstubsConfigurationError
from .statics import MANIFEST_SUFFIX, STUB_FILE_NAME

class StubOptions:
    '''
    Options controlling a stub generation run.

    Options may be passed as keyword arguments or read from a YAML mapping with
    `StubOptions.from_file`. Unknown option names are rejected, with a suggestion
    for the closest valid name.

    Attributes
    ----------
    only_target_types : bool
        Only emit types declared by the explicitly requested target binaries.
    builtin_binaries : Tuple[str, ...]
        Binaries whose exported types are always registered, such as the runtime's
        core library. They are resolved through the search paths and are never targets.
    stub_file_name : str
        File name written inside every namespace directory.
    manifest_suffix : str
        Suffix of binary manifest files, used when resolving references.
    quiet : bool
        Suppress progress output.
    '''

    __slots__ = (
        'only_target_types',
        'builtin_binaries',
        'stub_file_name',
        'manifest_suffix',
        'quiet',
    )

    _defaults: Dict[str, Any] = {
        'only_target_types' : False,
        'builtin_binaries'  : (),
        'stub_file_name'    : STUB_FILE_NAME,
        'manifest_suffix'   : MANIFEST_SUFFIX,
        'quiet'             : False,
    }

    only_target_types   : bool
    builtin_binaries    : Tuple[str, ...]
    stub_file_name      : str
    manifest_suffix     : str
    quiet               : bool

    def __init__(self, **kwargs: Any) -> None:
        for name in self.__slots__:
            setattr(self, name, self._defaults[name])

        for kwarg, value in kwargs.items():
            if kwarg not in self.__slots__:
                suggestion = difflib.get_close_matches(kwarg, self.__slots__, n=1)
                suggestion_string = '' if not suggestion else f' Did you mean \'{suggestion[0]}\'?'
                raise ReflexstubsConfigurationError(f'Invalid stub option: \'{kwarg}\'.{suggestion_string}')

            setattr(self, kwarg, self._validate(kwarg, value))

    def __contains__(self, item: object) -> bool:
        return item in self.__slots__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StubOptions):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        fields = ', '.join(f'{name}={getattr(self, name)!r}' for name in self.__slots__)
        return f'StubOptions({fields})'

    @staticmethod
    def _validate(name: str, value: Any) -> Any:
        if name in ('only_target_types', 'quiet'):
            if not isinstance(value, bool):
                raise ReflexstubsConfigurationError(
                    f'Option \'{name}\' must be a bool, not \'{type(value).__name__}\'.'
                )
            return value

        if name == 'builtin_binaries':
            if isinstance(value, str):
                value = (value, )
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise ReflexstubsConfigurationError(f'Option \'{name}\' must be a list of binary names.')
            return tuple(value)

        if not isinstance(value, str) or not value:
            raise ReflexstubsConfigurationError(f'Option \'{name}\' must be a non-empty string.')

        if name == 'stub_file_name' and ('/' in value or '\\' in value):
            raise ReflexstubsConfigurationError(f'Option \'{name}\' must be a plain file name, not \'{value}\'.')

        if name == 'manifest_suffix' and not value.startswith('.'):
            raise ReflexstubsConfigurationError(f'Option \'{name}\' must start with \'.\', not \'{value}\'.')

        return value

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__slots__}

    def merged(self, **overrides: Any) -> 'StubOptions':
        '''
        Return a copy of these options with every override that is not None applied.
        '''
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return StubOptions(**values)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'StubOptions':
        '''
        Read options from a YAML mapping. Keys may be written with dashes or underscores.
        '''
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except (OSError, yaml.YAMLError) as e:
            raise ReflexstubsConfigurationError(f'Could not read options file \'{path}\': {e}') from e

        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise ReflexstubsConfigurationError(
                f'Options file \'{path}\' must contain a mapping, not \'{type(data).__name__}\'.'
            )

        return cls(**{str(key).replace('-', '_'): value for key, value in data.items()})
