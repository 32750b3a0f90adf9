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
"""oathd init commands.

oathd init database

"""

import sys

import click
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from oathd.model import init_db_tables, setup_db

init_cmds = AppGroup("init", help="Initialise the oathd database.")


def erase_confirm(ctx, param, value):
    if ctx.params["erase_all_data"]:
        # The user asked for data to be erased. We now look for a confirmation
        # or prompt the user
        if not value:
            prompt = click.prompt(
                "Do you really want to erase the database?", type=click.BOOL
            )
            if not prompt:
                ctx.abort()


@init_cmds.command("database", help="Create tables in the database")
@click.option("--erase-all-data", is_flag=True, help="Erase ALL existing data")
@click.option(
    "--yes",
    is_flag=True,
    callback=erase_confirm,
    expose_value=False,
    help="Erase data without prompting for confirmation",
)
@with_appcontext
def init_db_command(erase_all_data):
    """
    Create new tables

    The database is initialized and optionally data is cleared.
    """

    if current_app.config["STORE_BACKEND"] != "sql":
        current_app.echo("The memory store backend needs no database", v=1)
        return

    if erase_all_data:
        info = "Recreating database"
    else:
        info = "Creating database"

    current_app.echo(info, v=1)
    try:
        # `setup_db` was skipped while creating the app for `oathd init`
        current_app.cli_cmd = "init-database"
        setup_db(current_app)
        init_db_tables(current_app, erase_all_data)
    except Exception as exx:
        current_app.echo(f"Failed to create database: {exx!r}")
        sys.exit(1)
    current_app.echo("Database created", v=1)
