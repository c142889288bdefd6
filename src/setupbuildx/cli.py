import click
import logging
import traceback

from .actions import Runtime
from .buildx import Buildx
from .config import Config
from .docker import Docker
from .exec import Exec
from .lifecycle import Lifecycle
from .utils import setup_logger, parse_module_levels
from .exceptions import (
    SetupBuildxError,
    ConfigurationError,
    InstallError,
    ExternalCommandError,
    UnsupportedModeError,
)
from . import __version__


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels), log_file=log_file)


def _abort(message: str):
    logging.error(message)
    ctx = click.get_current_context()
    if ctx.obj and ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


def handle_errors(func):
    """Decorator to handle common exceptions"""
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _abort(f"Configuration error: {e}")
        except InstallError as e:
            _abort(f"Install error: {e}")
        except UnsupportedModeError as e:
            _abort(f"Unsupported mode: {e}")
        except ExternalCommandError as e:
            _abort(f"{e}")
        except SetupBuildxError as e:
            _abort(f"An unexpected application error occurred: {e}")
        except FileNotFoundError as e:
            _abort(f"A required file was not found: {e}")
        except Exception as e:
            _abort(f"An unexpected error occurred: {e}")
    return wrapper


@handle_errors
def do_run(config_file: str):
    """Execute the main phase"""
    runtime = Runtime()
    exec_ = Exec()
    docker = Docker(exec_)
    config = Config(runtime, config_path=config_file, docker=docker if Docker.is_available() else None)
    Lifecycle(config, runtime=runtime, exec_=exec_, docker=docker).run()


@handle_errors
def do_post():
    """Execute the teardown phase"""
    Lifecycle(runtime=Runtime()).post()


@handle_errors
def do_inspect(name: str, standalone: bool):
    """Print the parsed builder as JSON"""
    builder = Buildx(standalone=standalone).inspect(name or "")
    click.echo(builder.model_dump_json(indent=2, by_alias=True, exclude_none=True))


@handle_errors
def do_version(standalone: bool):
    """Print the parsed buildx version"""
    click.echo(Buildx(standalone=standalone).version())


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'inst=DEBUG,lc=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.version_option(version=__version__, prog_name='setup-buildx')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """setup-buildx - Provision a buildx builder for CI pipelines

    \b
    Examples:
      setup-buildx run                    Main phase, inputs from INPUT_* variables
      setup-buildx run -c inputs.yml      Main phase, inputs from a YAML file
      setup-buildx post                   Teardown phase
      setup-buildx inspect mybuilder      Show a builder as JSON
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logging(debug, log_levels, log_file)


@cli.command()
@click.option('-c', '--config', 'config_file', type=click.Path(dir_okay=False), help='YAML file holding the inputs')
def run(config_file):
    """Provision the builder and report its outputs"""
    do_run(config_file)


@cli.command()
def post():
    """Remove the builder and the generated credentials"""
    do_post()


@cli.command()
@click.argument('name', required=False)
@click.option('--standalone', is_flag=True, help='Use the buildx binary instead of docker buildx')
def inspect(name, standalone):
    """Inspect a builder (the current one by default)"""
    do_inspect(name, standalone)


@cli.command()
@click.option('--standalone', is_flag=True, help='Use the buildx binary instead of docker buildx')
def version(standalone):
    """Print the buildx version"""
    do_version(standalone)


def main():
    cli()


if __name__ == "__main__":
    main()
