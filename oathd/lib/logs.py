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
logging helpers: request timing, function timing and the audit trail of
the validations
"""

import functools
import logging
from datetime import datetime

from flask import request

audit_log = logging.getLogger("oathd.audit")

# --------------------------------------------------------------------------

# helper functions

# --------------------------------------------------------------------------


def log_request_timedelta(logger):
    """
    this function logs the time delta between the start and
    the end of the request and should be called at the end.

    :param logger: The logger that should be used
    """

    start = request.environ.get("REQUEST_START_TIMESTAMP")

    if start is None:
        return

    stop = datetime.now()
    delta_sec = (stop - start).total_seconds()

    extra = {"type": "request_timedelta", "timedelta": delta_sec}

    logger.debug("Spent %f seconds for request", delta_sec, extra=extra)


def log_validation(oath_type, credential, result):
    """
    write the outcome of a validation to the audit log

    only the oath type, the credential reference and the reason are
    logged - never the response or any secret. Replays are logged as
    warning as they might indicate an attack.

    :param oath_type: the oath type of the validation
    :param credential: the credential reference
    :param result: the `ValidationResult`
    """

    reason = result.reason.value

    extra = {
        "type": "validation",
        "oath_type": oath_type.value,
        "credential": credential,
        "accepted": result.accepted,
        "reason": reason,
    }

    if result.accepted:
        level = logging.INFO
    elif result.reason.is_replay:
        level = logging.WARNING
    else:
        level = logging.INFO

    audit_log.log(
        level,
        "%s validation for credential %r: %s",
        oath_type.value,
        credential,
        reason,
        extra=extra,
    )


# ------------------------------------------------------------------------------

# function decorators

# ------------------------------------------------------------------------------


def log_timedelta(logger):
    """
    Decorator to log time spent in processing a function
    from its entry point to its return.

    :param logger: The logger object that should be used
    """

    def _inner(func):
        @functools.wraps(func)
        def _log_time(*args, **kwargs):
            start = datetime.now()
            returnvalue = func(*args, **kwargs)
            stop = datetime.now()
            delta_sec = (stop - start).total_seconds()

            extra = {
                "type": "function_timedelta",
                "function_name": func.__name__,
                "timedelta": delta_sec,
            }

            logger.debug(
                "Spent %f seconds in %s", delta_sec, func.__name__, extra=extra
            )

            return returnvalue

        return _log_time

    return _inner


# eof #########################################################################
