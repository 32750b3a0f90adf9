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
"""
 This file contains the database definition / database model for the
 oathd objects: the credentials with their counters and the issued ocra
 challenges.

 The tables are only used by the sql stores in `oathd.lib.store.sql` - the
 verification engine itself does not know about them.
"""


import logging
import sys

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect

log = logging.getLogger(__name__)

db = SQLAlchemy()

# exit code 3 and 4 prevents gunicorn from restarting workers
SYS_EXIT_CODE = 4

from oathd.model.challenge import OcraChallenge  # noqa
from oathd.model.credential import Credential  # noqa


def setup_db(app) -> None:
    """Set up the database for oathd.

    This method is used to set up a SQLAlchemy database engine for the
    oathd database. It does NOT generate a table structure if the database
    doesn't have one (see `init_db_tables()` below for that).

    The setup is skipped for commands which don't touch the database
    (`oathd init …`, `oathd config …`) and for the memory store backend. For
    `oathd init database` the missing tables are not an error, as they
    are about to be created.
    """

    if not app.database_needed():
        return

    app.config["SQLALCHEMY_DATABASE_URI"] = app.config["DATABASE_URI"]

    # the app might be set up already when `oathd init database` comes back
    if "sqlalchemy" not in app.extensions:
        db.init_app(app)

    cli_cmd = getattr(app, "cli_cmd", "")
    if cli_cmd == "init-database":
        return

    table_names = inspect(db.engine).get_table_names()

    for table in (Credential.__tablename__, OcraChallenge.__tablename__):
        if table not in table_names:
            log.critical(
                "Database schema must be initialised, "
                "run `oathd init database`."
            )
            sys.exit(SYS_EXIT_CODE)


def init_db_tables(app, drop_data=False):
    """Initialise the oathd database tables.

    This function initialises the oathd tables given an empty database
    (it also works if the database isn't empty).

    :param drop_data: If `True`, all data will be cleared. Use with caution!
    """

    # Use `app.echo()` if available, otherwise standard logging.
    echo = getattr(
        app,
        "echo",
        lambda msg, v=0: log.log(logging.INFO if v else logging.ERROR, msg),
    )

    echo("Setting up database...", v=1)

    try:
        if drop_data:
            echo("Dropping tables to erase all data...", v=1)
            db.drop_all()

        echo("Creating tables...", v=1)
        db.create_all()

        db.session.commit()

    except Exception as exx:
        echo(f"Exception occured during database setup: {exx!r}")
        db.session.rollback()
        raise exx


# eof #########################################################################
