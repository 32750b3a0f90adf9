#
#    LinOTP - the open source solution for two factor authentication
#    Copyright (C) 2010-2019 KeyIdentity GmbH
#    Copyright (C) 2019-     netgo software GmbH
#
#    This file is part of LinOTP server.
#
#    This program is free software: you can redistribute it and/or
#    modify it under the terms of the GNU Affero General Public
#    License, version 3, as published by the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU Affero General Public License for more details.
#
#    You should have received a copy of the
#               GNU Affero General Public License
#    along with this program.  If not, see <http://www.gnu.org/licenses/>.
#
#
#    E-mail: info@linotp.de
#    Contact: www.linotp.org
#    Support: www.linotp.de
#
"""Entry point for the oathd CLI.

The `main()` function in this file is installed as a console entry point
in `setup.py`, so that the shell command `oathd` calls that function.
"""

import os
import sys

import click
from flask import Flask, current_app
from flask.cli import FlaskGroup, with_appcontext

from oathd.app import create_app
from oathd.settings import OATHConfigValueError


class Echo:
    """Echo class, which extends `click.echo()` to respect verbosity.

    The verbosity of a message is given by the additional parameter `v`:
    0 for errors (always displayed), 1 for informational messages (seen
    with `-v`). A verbosity of `-1` suppresses all output, which
    implements the `--quiet` option.

    Unlike `click.echo()`, messages go to `stderr` by default.
    """

    def __init__(self, verbosity=0):
        self.verbosity = verbosity

    def __call__(self, message, v=0, err=True):
        if v <= self.verbosity:
            click.echo(message, err=err)


# Custom Click command group. We need this so we can take a peek at the
# command line prior to the initialisation of the Flask app, to see what
# sort of command we're running. That information is helpful because it
# allows us to insist that the database is properly initialised, except
# when we're doing `oathd init` or `oathd config`.


class OATHDGroup(FlaskGroup):
    def __init__(self, **kwargs):
        # Check if --help is in the arguments to avoid app initialization
        if "--help" in sys.argv:

            def minimal_app():
                """Create a minimal Flask app just for displaying help."""
                return Flask("oathd_help")

            kwargs["create_app"] = minimal_app

        super().__init__(add_version_option=False, **kwargs)
        for arg in sys.argv[1:]:
            if arg[0] != "-":
                os.environ["OATHD_CMD"] = arg
                break


def make_create_app():
    def factory():
        config_name = os.getenv("OATHD_CONFIG", "default")
        try:
            return create_app(config_name)
        except OATHConfigValueError as e:
            click.echo("Failed to initialize app configuration", err=True)
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return factory


# Main command group for the application. Here's where we end up when
# the user gives the `oathd` command on the command line.


@click.version_option(package_name="oathd", message="oathd %(version)s")
@click.group(name="oathd", cls=OATHDGroup, create_app=make_create_app())
@click.option(
    "--verbose",
    "-v",
    count=True,
    help=(
        "Increase amount of output from the command (can be specified several times)."
    ),
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help=("Don't generate any output at all (check exit code for success/failure)."),
)
@with_appcontext
def main(verbose, quiet):
    current_app.echo = Echo(-1 if quiet else verbose)


from oathd.cli.challenges_cmd import challenges_cmds  # noqa: E402
from oathd.cli.init_cmd import init_cmds  # noqa: E402
from oathd.settings import config_cmds  # noqa: E402

main.add_command(init_cmds)
main.add_command(challenges_cmds)
main.add_command(config_cmds)


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
