from pathlib import Path
from typing import Optional, Tuple
import click

from ..config import StubOptions
from ..errors import ReflexstubsError
from ..generator import GenerationResult, GenerationSession, build_stubs
from ..loader import BinaryLoader
from .helpers import (
    echo_error,
    render_inspection,
    render_output,
    render_statistic,
    timed,
    validate_dest_path,
    validate_target_paths,
)

@click.group()
def stub() -> None:
    '''
    Generate .pyi stubs from binary metadata.
    '''
    pass

@stub.command('generate')
@click.argument(
    'targets',
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    '--dest', '-d',
    type=click.Path(file_okay=False, path_type=Path),
    default=Path('stubs'),
    show_default=True,
    help='Directory to write the stub tree to'
)
@click.option(
    '--search-path', '-s', 'search_paths',
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Extra directory to search for referenced binaries, may be repeated'
)
@click.option(
    '--builtin', '-b', 'builtins',
    multiple=True,
    help='Binary whose exported types are always generated, may be repeated'
)
@click.option(
    '--only-targets/--all-types',
    default=None,
    help='Only write types declared by the target binaries'
)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML file with generation options'
)
@click.option(
    '--report', '-o',
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Write the report to a file instead of printing to stdout - extension is inferred if not specified'
)
@click.option(
    '--format', '-f',
    type=click.Choice(['txt', 'json', 'yaml']),
    default='txt',
    show_default=True,
    help='Select the format of the report'
)
@click.option(
    '--quiet', '-q',
    is_flag=True,
    default=False,
    help='Do not print progress while generating'
)
def stub_generate(
        targets         : Tuple[Path, ...],
        dest            : Path,
        search_paths    : Tuple[Path, ...],
        builtins        : Tuple[str, ...],
        only_targets    : Optional[bool],
        config          : Optional[Path],
        report          : Optional[Path],
        format          : str,
        quiet           : bool,
    ) -> None:
    '''Generate stubs for TARGETS and every type they refer to.'''

    if not validate_target_paths(targets) or not validate_dest_path(dest):
        raise SystemExit(1)

    try:
        options = StubOptions.from_file(config) if config else StubOptions()
        options = options.merged(
            only_target_types=only_targets,
            builtin_binaries=(*options.builtin_binaries, *builtins) if builtins else None,
            # Progress lines would break a json/yaml report printed to stdout
            quiet=quiet or (format != 'txt' and report is None) or None,
        )

        @timed
        def run() -> GenerationResult:
            return build_stubs(dest, targets, search_paths, session=GenerationSession(options))

        elapsed, result = run()

    except ReflexstubsError as e:
        echo_error(str(e))
        raise SystemExit(1)

    if report and not report.suffix:
        report = report.with_suffix(f'.{format}')

    if report and report.exists() and report.is_file():
        report.unlink()

    render_output(result, output=report, format=format)
    render_statistic(elapsed, result, output=report, format=format)

@stub.command('inspect')
@click.argument('target', type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    '--search-path', '-s', 'search_paths',
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Extra directory to search for referenced binaries, may be repeated'
)
@click.option(
    '--format', '-f',
    type=click.Choice(['txt', 'json', 'yaml']),
    default='txt',
    show_default=True,
    help='Select the format of the output'
)
def stub_inspect(target: Path, search_paths: Tuple[Path, ...], format: str) -> None:
    '''List the exported types of TARGET by namespace.'''

    if not validate_target_paths((target, )):
        raise SystemExit(1)

    loader = BinaryLoader()
    loader.install_resolve_hook()
    loader.add_search_paths(search_paths)

    try:
        binary = loader.load_target(target)
    except ReflexstubsError as e:
        echo_error(str(e))
        raise SystemExit(1)

    click.echo(render_inspection(binary, format=format))
