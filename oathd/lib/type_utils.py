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
""" contains utility functions for type checking """


def boolean(value):
    """
    type converter for boolean config entries
    """
    true_def = ("yes", "true", "1")
    false_def = ("no", "false", "0")

    if value in (True, False):
        return value

    if value.lower() not in true_def and value.lower() not in false_def:
        raise ValueError(f"unable to convert {value!r}")

    return value.lower() in true_def


def string_list(value):
    """
    type converter for whitespace or comma separated config entries
    """
    if isinstance(value, (list, tuple, set)):
        return list(value)

    return [entry for entry in value.replace(",", " ").split() if entry]
