"""
Unified CLI entrypoint for the binary packaging tool
Uses click for modular subcommands
"""
import functools
import sys

import click
from loguru import logger
from tabulate import tabulate

from mbgl_packaging.core.errors import PackagingError
from mbgl_packaging.core.logging import LoggingManager
from mbgl_packaging.modules.binary_packaging import BinaryPackager
from mbgl_packaging.scripts.config_parsing import LOG_LEVELS, ConfigParser, PackagerConfig


def packaging_options(func):
    @click.option('--config', 'config_path', default=None, type=click.Path(dir_okay=False),
                  help='YAML or INI file with packaging settings')
    @click.option('--manifest', default=None, help='Package manifest (default: package.json)')
    @click.option('--lib-dir', default=None, help='Binary output root (default: ./lib)')
    @click.option('--output-dir', default=None, help='Directory for created tarballs (default: cwd)')
    @click.option('--binary-name', default=None, help='Addon file inside each ABI directory (default: mbgl.node)')
    @click.option('--abi-prefix', default=None, help='ABI directory name prefix (default: node-v)')
    @click.option('--log-level', default=None,
                  type=click.Choice(LOG_LEVELS, case_sensitive=False))
    @functools.wraps(func)
    def wrapper(config_path, **overrides):
        try:
            base = ConfigParser(config_path).parse() if config_path else PackagerConfig()
            config = base.merged(**overrides)
            LoggingManager(config.log_level).setup()
            return func(config)
        except PackagingError as e:
            logger.error(str(e))
            sys.exit(e.exit_code)
    return wrapper


@click.group()
def cli():
    """Package prebuilt mbgl.node binaries into per-ABI tarballs."""
    pass


@cli.command()
@packaging_options
def package(config):
    """Create one tarball per ABI directory for this host."""
    packager = BinaryPackager.from_config(config)
    packager.run()
    rows = [
        [t.name, t.abi, t.platform, t.arch, ", ".join(t.contents)]
        for t in packager.tarballs
    ]
    click.echo(tabulate(rows, headers=["Tarball", "ABI", "Platform", "Arch", "Contents"], tablefmt="github"))


@cli.command()
@packaging_options
def discover(config):
    """List the ABI directories and the tarballs `package` would create."""
    packager = BinaryPackager.from_config(config)
    rows = [[d.name, d.abi, str(d.binary_path), name] for d, name in packager.plan()]
    click.echo(tabulate(rows, headers=["Directory", "ABI", "Binary", "Tarball"], tablefmt="github"))


def main():
    cli()


if __name__ == '__main__':
    main()
