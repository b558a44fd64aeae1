from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, ParamSpec
import click
import functools
import json
import re
import time
import yaml

from ..generator import GenerationResult
from ..metadata import Binary
from ..paths import namespace_module

T = TypeVar('T')
P = ParamSpec('P')

def timed(fn: Callable[P, T]) -> Callable[P, Tuple[float, T]]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Tuple[float, T]:
        start = time.perf_counter()
        result = fn(*args, **kwargs)
        end = time.perf_counter()
        elapsed = end - start
        return elapsed, result
    return wrapper

def strip_ansi(text: str) -> str:
    ansi_escape = re.compile(r'\x1B\[[0-?]*[ -/]*[@-~]')
    return ansi_escape.sub('', text)

def writeln(content: str, *, output: Optional[Path]) -> None:
    if output:
        content = f'{strip_ansi(content)}\n'
        output.parent.mkdir(parents=True, exist_ok=True)
        if not output.exists():
            output.write_text(content, encoding='utf-8')
        else:
            with open(output, 'a', encoding='utf-8') as file:
                file.write(content)

    else:
        click.echo(content)

def echo_error(message: str) -> None:
    click.echo('{}: {}'.format(click.style('[Error]', bold=True, fg='red'), message), err=True)

def format_elapsed(elapsed: float) -> str:
    if elapsed < 60:
        # Show seconds with 4 significant figures
        return f'{elapsed:.4g}s'
    elif elapsed < 3600:
        minutes = int(elapsed // 60)
        seconds = elapsed % 60
        return f'{minutes}m {seconds:.4g}s'
    else:
        hours = int(elapsed // 3600)
        minutes = int((elapsed % 3600) // 60)
        seconds = elapsed % 60
        return f'{hours}h {minutes}m {seconds:.4g}s'

def validate_target_paths(paths: Sequence[Path]) -> bool:
    for path in paths:
        if not path.exists():
            echo_error(f'Provided target does not exist: {path}')
            return False

        elif not path.is_file():
            echo_error(f'Provided target is not a file: {path}')
            return False

    return True

def validate_dest_path(path: Path) -> bool:
    if path.exists() and not path.is_dir():
        echo_error(f'Provided destination is not a directory: {path}')
        return False

    return True

def serialize(payload: Any, format: str) -> str:
    if format == 'json':
        return json.dumps(payload, indent=4, default=str)

    elif format == 'yaml':
        return yaml.dump(payload, sort_keys=False)

    raise ValueError(f'Unsupported format: {format}')

def render_output(
        result  : GenerationResult,
        *,
        output  : Optional[Path],
        format  : str,
    ) -> None:
    '''
    Write the generation report to file or stdout in the specified format.

    Parameters
    ----------
    result : GenerationResult
        The finished generation run.
    output : Optional[Path]
        The file to write to, or None to print to stdout.
    format : str
        One of 'txt', 'json', or 'yaml'.
    '''
    if format in ('json', 'yaml'):
        writeln(serialize(result.to_dict(), format), output=output)
        return

    if format != 'txt':
        raise ValueError(f'Unsupported format: {format}')

    lines: List[str] = []
    for info in result.sorted_files():
        lines.append('{}: {}'.format(
            click.style(str(info.path), fg='black', underline=True),
            click.style(info.module, fg='cyan', bold=True),
        ))
        lines.extend(f'    {name}' for name in info.types)

    for namespace in sorted(namespace_module(ns) for ns in result.skipped):
        lines.append('{} {}'.format(click.style('[Skipped]:', fg='yellow', underline=True), namespace))

    writeln('\n'.join(lines), output=output)

def render_statistic(
        elapsed : float,
        result  : GenerationResult,
        *,
        output  : Optional[Path],
        format  : str,
    ) -> None:
    n_files = len(result.files)
    n_types = result.n_types

    files_word_str = 'stub file' if n_files == 1 else 'stub files'
    types_word_str = 'type' if n_types == 1 else 'types'

    files_string = click.style(f'{n_files} {files_word_str}', fg='red' if not n_files else 'green', bold=True)
    types_string = click.style(f'{n_types} {types_word_str}', fg='red' if not n_types else 'green', bold=True)

    # Keep json/yaml reports parseable
    if format != 'txt':
        return

    writeln(f'Wrote {files_string} with {types_string} in {format_elapsed(elapsed)}', output=output)

def render_inspection(
        binary  : Binary,
        *,
        format  : str,
    ) -> str:
    '''
    Describe a binary's exported types grouped by namespace.
    '''
    if format in ('json', 'yaml'):
        payload = binary.to_dict()
        payload['types'] = [tp.to_dict() for tp in binary.exported_types()]
        return serialize(payload, format)

    if format != 'txt':
        raise ValueError(f'Unsupported format: {format}')

    by_namespace: Dict[str, List[str]] = {}
    for tp in binary.exported_types():
        by_namespace.setdefault(namespace_module(tp.namespace), []).append(
            '    {} {}'.format(click.style(tp.kind, fg='magenta'), click.style(tp.name, fg='cyan', bold=True))
        )

    lines = [click.style(binary.full_name, fg='bright_green', bold=True)]
    for reference in binary.reference_names:
        lines.append('  {} {}'.format(click.style('references', fg='black'), reference))

    for namespace in sorted(by_namespace):
        lines.append(click.style(namespace, fg='yellow'))
        lines.extend(sorted(by_namespace[namespace], key=strip_ansi))

    return '\n'.join(lines)
