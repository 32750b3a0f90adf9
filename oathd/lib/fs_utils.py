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
"""File system utility functions."""

import errno
import os


def ensure_dir(app, what: str, conf_name: str, *sub_dirs: str, mode: int = 0o770):
    """Make sure the directory whose name is given by
    `app.config[conf_name]/sub/dirs` exists. The base directory is created
    as well if it is missing. Return the directory name. Use `what` to
    describe what sort of directory you're creating; this will show up in
    the error if the directory can't be created.
    """

    if (not conf_name.endswith("_DIR")) or (conf_name not in app.config):
        raise KeyError(f"Invalid oathd configuration setting '{conf_name}'")

    dir_name = os.path.join(app.config[conf_name], *sub_dirs)

    if os.path.exists(dir_name) and not os.path.isdir(dir_name):
        raise NotADirectoryError(
            errno.ENOTDIR,
            f"File '{dir_name}' ({conf_name}) is not a directory",
            dir_name,
        )

    if not os.path.isdir(dir_name):
        try:
            os.makedirs(dir_name, mode=mode, exist_ok=True)
        except OSError as ex:
            raise OSError(
                ex.errno,
                f"Error creating {what} directory '{dir_name}': "
                f"{ex.strerror} ({ex.errno})",
                dir_name,
            )

    return dir_name
