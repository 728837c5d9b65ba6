"""
curlkit command line entry point.
"""

import click

from curlkit import __version__
from curlkit.http.cli import http
from curlkit.logging_config import configure_logging


@click.group()
@click.version_option(__version__, prog_name="curlkit")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log to this file")
def main(debug: bool, log_file: str | None):
    """curlkit - declarative HTTP requests over libcurl."""
    configure_logging(debug=debug, log_file=log_file)


main.add_command(http)


if __name__ == "__main__":
    main()
