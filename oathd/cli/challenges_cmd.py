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
"""oathd challenges commands.

oathd challenges reap

"""

import sys

from flask import current_app
from flask.cli import AppGroup, with_appcontext

challenges_cmds = AppGroup("challenges", help="Manage the issued ocra challenges.")


@challenges_cmds.command("reap", help="Remove the expired ocra challenges")
@with_appcontext
def reap_challenges_command():
    """
    remove the expired challenges from the session store

    expired challenges are never accepted, removing them only reclaims
    their storage.
    """

    try:
        removed = current_app.session_store.reap()
    except Exception as exx:
        current_app.echo(f"Failed to remove expired challenges: {exx!r}")
        sys.exit(1)

    current_app.echo(f"{removed} expired challenges removed", v=1)
