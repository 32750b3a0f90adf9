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
the configuration schema of oathd

Every configuration item is described by a `ConfigItem` with its type,
conversion and validation functions and its default. The `ExtFlaskConfig`
of the app uses the schema to convert and check every value which is
assigned, so configuration files and environment variables may give all
values as strings.
"""

import json
import os
import textwrap
from dataclasses import dataclass
from typing import Any, Callable, Type

import click
from flask import current_app
from flask.cli import AppGroup

from oathd.lib.type_utils import boolean as to_boolean
from oathd.lib.type_utils import string_list

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

VALID_HASHLIBS = {"sha1", "sha256", "sha512"}

VALID_STORE_BACKENDS = {"sql", "memory"}

# The functions here are really factory functions; they are used in
# `ConfigItem` definitions to create the functions that do the actual
# checking. The returned function's doc string contains a summary of what
# the function does, which is shown by `oathd config explain`.


class OATHConfigKeyError(KeyError):
    """Used for oathd configuration items with invalid names."""


class OATHConfigValueError(ValueError):
    """Used for out-of-range errors etc. with oathd configuration items."""


def check_int_in_range(min=None, max=None):
    """Factory function that will return a function that ensures that `min
    <= value <= max`. If `min` or `max` are not given, the practically
    default to “negative infinity” and “positive infinity”,
    respectively.
    """

    def f(key, value):
        result = int(value)  # Raises an exception if `value` is not an `int`
        if min is not None and result < min:
            raise OATHConfigValueError(f"{key} is {result} but must be at least {min}")
        if max is not None and result > max:
            raise OATHConfigValueError(f"{key} is {result} but must be at most {max}")

    if min is None and max is not None:
        f.__doc__ = f"value <= {max}"
    elif min is not None and max is None:
        f.__doc__ = f"value >= {min}"
    elif min is not None and max is not None:
        f.__doc__ = f"{min} <= value <= {max}"
    return f


def check_membership(allowed={}):
    """Factory function that will return a function that ensures that
    `value` is contained in `allowed` (the set of allowed values).
    """
    allowed_values = ", ".join(repr(s) for s in sorted(allowed))

    def f(key, value):
        if value not in allowed:
            raise OATHConfigValueError(
                f"{key} is {value} but must be one of {allowed_values}."
            )

    f.__doc__ = f"value in {{{allowed_values}}}"
    return f


def check_absolute_pathname():
    """Factory function that will return a function that ensures that
    `value` is an absolute path name. Used to check `ROOT_DIR`.
    """

    def f(key, value):
        if not value or value[0] != "/":
            raise OATHConfigValueError(
                f"{key} must be an absolute path name but {value} is relative."
            )

    f.__doc__ = "value is an absolute path name"
    return f


def check_ocra_suite():
    """Factory function that will return a function that ensures that
    `value` is an ocra suite which can be used to issue challenges.
    """

    def f(key, value):
        # imported here, the settings must be loadable without the engine
        from oathd.lib.ocra import OcraSuite

        try:
            OcraSuite(value)
        except ValueError as exx:
            raise OATHConfigValueError(f"{key} is not a valid ocra suite: {exx}")

    f.__doc__ = "value is an ocra suite like 'OCRA-1:HOTP-SHA1-6:QN08'"
    return f


@dataclass
class ConfigItem:
    """This class represents individual configuration settings. A
    `ConfigSchema` is basically a dictionary of `ConfigItem` instances.
    """

    name: str  # Name of the item
    type: Type = str  # Type of the item
    convert: Callable[[str], Type] = None  # Converts strings to type
    validate: Callable[[str, Any], None] = None  # Checks if value is valid
    default: Any = None  # Default value of item
    help: str = ""  # Help message string


class ConfigSchema:
    """This class represents a complete schema of configuration settings."""

    def __init__(self, schema=None, refuse_unknown=False):
        """Start a `ConfigSchema` instance. The `schema` passed into the
        constructor should be an iterable even though we store the schema
        internally as a dictionary in order to be able to find individual
        items more efficiently. If `refuse_unknown` is `True`, any items
        that are not in the schema will not validate.
        """
        self.schema = {}
        if schema is not None:
            for s in schema:
                self.schema[s.name] = s
        self.refuse_unknown = refuse_unknown

    def find_item(self, key):
        """Returns the `ConfigItem` instance for the configuration item
        called `key` if it exists, otherwise `None`.
        """
        return self.schema.get(key, None)

    def check_item(self, key, value):
        """Converts a new value for a configuration item to the proper type
        (according to the `ConfigItem` data structure for the item) and
        also applies the validate function if one is defined for the item.
        We're only doing the type conversion if the type of the `value`
        parameter is `str`; if people are using different types in their
        configuration files we assume that they know what they're doing.
        """

        # Refuse non-schema configuration items if `refuse_unknown` is `True`,
        # otherwise just let them through as they are.
        item = self.schema.get(key, None)
        if item is None:
            if self.refuse_unknown:
                raise OATHConfigKeyError(f"Unknown configuration item '{key}'")
            return value
        # Make sure path-like items are strings, not `pathlib` paths.
        if key.endswith(("_DIR", "_FILE")):
            value = str(value)
        # If `value` is `str` but the schema wants non-`str`, do a
        # conversion, either using the function provided or the type itself.
        if item.type != str and isinstance(value, str):
            value = item.convert(value) if item.convert is not None else item.type(value)
        # Validate the value if a validate function is registered
        if item.validate is not None and value is not None:
            item.validate(key, value)
        return value

    def as_dict(self):
        """Return the names and default values of the schema as a dictionary.
        This is useful to populate the configuration with initial values
        without having to repeat any of the defaults.
        """
        return {item.name: item.default for item in self.schema.values()}

    def items(self):
        """Return the names and schema items of the schema."""
        return self.schema.items()


_config_schema = ConfigSchema(
    [
        ConfigItem(
            "ROOT_DIR",
            str,
            default="",
            # `ROOT_DIR` defaults to `app.root_path` in `init_app()` below.
            validate=check_absolute_pathname(),
            help=(
                "The directory prepended to relative directory and file "
                "names in configuration files."
            ),
        ),
        ConfigItem(
            "LOG_FILE_DIR",
            str,
            default="logs",
            help=(
                "Directory for log files. We're using a "
                "`RotatingFileHandler` to manage log files, and the main "
                "log file is written to `LOG_FILE_DIR/LOG_FILE_NAME`."
            ),
        ),
        ConfigItem(
            "LOG_FILE_NAME",
            str,
            default="oathd.log",
            help="Name for the main log file.",
        ),
        ConfigItem(
            "LOG_FILE_LINE_FORMAT",
            str,
            default=(
                "%(asctime)s %(levelname)s: %(message)s "
                "[in %(pathname)s:%(lineno)d]"
            ),
            help=(
                "Format for individual lines in the main log file. "
                "Refer to the Python documentation for the details on "
                "log file format strings."
            ),
        ),
        ConfigItem(
            "LOG_CONSOLE_LINE_FORMAT",
            str,
            default="[%(asctime)s][%(levelname)s][%(name)s:%(lineno)d] %(message)s",
            help="Format for individual lines on the console.",
        ),
        ConfigItem(
            "LOG_FILE_MAX_LENGTH",
            int,
            validate=check_int_in_range(min=0),
            default=10 * 1024 * 1024,
            help="Log files will be rotated when they reach this length (in bytes)",
        ),
        ConfigItem(
            "LOG_FILE_MAX_VERSIONS",
            int,
            validate=check_int_in_range(min=0),
            default=10,
            help="Up to this many old log files will be kept.",
        ),
        ConfigItem(
            "LOG_LEVEL",
            str,
            validate=check_membership(VALID_LOG_LEVELS),
            default="INFO",
            help="Messages will be logged only if they are at this level or above.",
        ),
        ConfigItem(
            "LOG_FILE_LEVEL",
            str,
            validate=check_membership(VALID_LOG_LEVELS),
            default="WARNING",
            help=(
                "Messages will be written to the log file only if they "
                "are at this level or above. Messages must pass "
                "`LOG_LEVEL` first."
            ),
        ),
        ConfigItem(
            "LOG_CONSOLE_LEVEL",
            str,
            validate=check_membership(VALID_LOG_LEVELS),
            default="WARNING",
            help=(
                "Messages will be written to the console only if they "
                "are at this level or above. Messages must pass "
                "`LOG_LEVEL` first."
            ),
        ),
        ConfigItem(
            "LOG_CONFIG",
            dict,
            convert=json.loads,
            default=None,
            help=(
                "You can completely redefine the oathd logging setup by "
                "passing a configuration dictionary in `LOG_CONFIG`. The "
                "default value of `None` enables a basic setup based on the "
                "`LOG_*` parameters."
            ),
        ),
        ConfigItem(
            "DATABASE_URI",
            str,
            default="sqlite:///{}",
            help="Contains uri to your database.",
        ),
        ConfigItem(
            "SQLALCHEMY_TRACK_MODIFICATIONS",
            bool,
            convert=to_boolean,
            default=False,
            help=(
                "Controls signalling support in the database framework. "
                "oathd doesn't use it, so it's best to leave this setting "
                "alone."
            ),
        ),
        ConfigItem(
            "STORE_BACKEND",
            str,
            validate=check_membership(VALID_STORE_BACKENDS),
            default="sql",
            help=(
                "Where credentials, counters and issued challenges are "
                "kept: `sql` uses the database at `DATABASE_URI`, `memory` "
                "keeps them in the process and loses them on restart."
            ),
        ),
        ConfigItem(
            "CONSUMER_KEYS",
            list,
            convert=string_list,
            default=[],
            help=(
                "The keys of the applications which may use the service, "
                "separated by whitespace or commas. A request must present "
                "one of them in the `X-OATH-Consumer-Key` header or the "
                "`consumerKey` parameter. If empty, all requests are refused."
            ),
        ),
        ConfigItem(
            "OATH_OCRA_SUITE",
            str,
            validate=check_ocra_suite(),
            default="OCRA-1:HOTP-SHA1-6:QN08",
            help="The ocra suite of the issued challenges.",
        ),
        ConfigItem(
            "OATH_OCRA_CHALLENGE_TIMEOUT",
            int,
            validate=check_int_in_range(min=1),
            default=120,
            help="Seconds an issued ocra challenge stays valid.",
        ),
        ConfigItem(
            "OATH_OCRA_MAX_ATTEMPTS",
            int,
            validate=check_int_in_range(min=1),
            default=3,
            help=(
                "Number of wrong responses to an ocra challenge after "
                "which the challenge is dropped."
            ),
        ),
        ConfigItem(
            "OATH_OCRA_WINDOW",
            int,
            validate=check_int_in_range(min=0),
            default=0,
            help=(
                "Counter look-ahead for counter based ocra suites and "
                "number of tolerated time steps for time based ocra suites."
            ),
        ),
        ConfigItem(
            "OATH_HOTP_DIGITS",
            int,
            validate=check_int_in_range(min=6, max=10),
            default=6,
            help="Number of digits of the hotp values.",
        ),
        ConfigItem(
            "OATH_HOTP_HASHLIB",
            str,
            validate=check_membership(VALID_HASHLIBS),
            default="sha1",
            help="Hash function of the hotp hmac.",
        ),
        ConfigItem(
            "OATH_HOTP_WINDOW",
            int,
            validate=check_int_in_range(min=0),
            default=10,
            help="Number of counters searched ahead of the expected counter.",
        ),
        ConfigItem(
            "OATH_TOTP_DIGITS",
            int,
            validate=check_int_in_range(min=6, max=10),
            default=6,
            help="Number of digits of the totp values.",
        ),
        ConfigItem(
            "OATH_TOTP_HASHLIB",
            str,
            validate=check_membership(VALID_HASHLIBS),
            default="sha1",
            help="Hash function of the totp hmac.",
        ),
        ConfigItem(
            "OATH_TOTP_TIME_STEP",
            int,
            validate=check_int_in_range(min=1),
            default=30,
            help="Length of a totp time step in seconds.",
        ),
        ConfigItem(
            "OATH_TOTP_WINDOW",
            int,
            validate=check_int_in_range(min=0),
            default=1,
            help=(
                "Number of time steps a totp value may be before or after "
                "the current one."
            ),
        ),
        ConfigItem(
            "OATH_TOTP_T0",
            int,
            validate=check_int_in_range(min=0),
            default=0,
            help="Unix time the totp time steps are counted from.",
        ),
    ]
)


# This will become the static `init_app()` method of the `Config` class.
# By the time this method is called, the `app` is known, and we can associate
# the `_config_schema` with the `app` without ever having to mention the
# `_config_schema` variable outside this file. `ROOT_DIR` follows the
# Flask `app.root_path`, which is only known dynamically.


def _init_app(app):
    app.config.set_schema(_config_schema)
    root_dir = _config_schema.find_item("ROOT_DIR")
    root_dir.default = app.config["ROOT_DIR"] = app.root_path


# This is equivalent to a `class Config:` definition, but the attributes
# are taken from the `_config_schema`, so Flask's `.from_object()` finds
# the schema defaults as class attributes.

_attrs = {"init_app": staticmethod(_init_app)}
_attrs.update(_config_schema.as_dict())
Config = type("Config", (object,), _attrs)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"
    LOG_FILE_LEVEL = LOG_LEVEL
    DATABASE_URI = os.getenv("OATHD_DATABASE_URI") or "sqlite:///" + os.path.join(
        basedir, "oathd-dev.sqlite"
    )


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = "DEBUG"
    DATABASE_URI = os.getenv("OATHD_DATABASE_URI") or "sqlite:///" + os.path.join(
        basedir, "oathd-test.sqlite"
    )


class ProductionConfig(Config):
    DATABASE_URI = os.getenv("OATHD_DATABASE_URI") or "sqlite:///" + os.path.join(
        basedir, "oathd.sqlite"
    )


configs = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


# ----------------------------------------------------------------------
# CLI commands
# ----------------------------------------------------------------------

config_cmds = AppGroup("config", help="Inspect the configuration settings.")


@config_cmds.command("show", help="Output current configuration settings.")
@click.option(
    "--modified",
    "-m",
    is_flag=True,
    help="Show only items whose values differ from their defaults.",
)
@click.option(
    "--values", "-V", is_flag=True, help="Show only values of items, not their names."
)
@click.argument("items", nargs=-1)
def config_show_cmd(modified, values, items=None):
    """Show the current configuration settings."""

    schema = current_app.config.config_schema
    for k, v in sorted(current_app.config.items()):
        display = not items or k in items
        if modified and display:
            item = schema.find_item(k)
            display = item is not None and v != item.default
        if display:
            v = current_app.config[k]
            if k == "CONSUMER_KEYS":
                # the keys are credentials of the consuming applications
                v = ["*****"] * len(v)
            click.echo(("" if values else f"{k}=") + str(v))


@config_cmds.command("explain", help="Describe configuration settings in detail.")
@click.argument("items", nargs=-1)
def config_explain_cmd(items=None):
    """Explain configuration settings in the schema."""

    schema = current_app.config.config_schema
    if not items:
        items = schema.as_dict().keys()
    for name in items:
        item = schema.find_item(name)
        if item is None:
            click.echo(f"No information on {name}")
            continue
        click.echo(f"{item.name}:")
        click.echo(f"  Type: {item.type.__qualname__}")
        if item.validate is not None and item.validate.__doc__:
            click.echo(f"  Constraints: {item.validate.__doc__}")
        click.echo(f"  Default value: {item.default}")
        description = f"  Description: {item.help}"
        click.echo(
            textwrap.fill(description, initial_indent="", subsequent_indent="    ")
        )
