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

import importlib
import logging
import os
import stat
import sys
import time
from datetime import datetime
from logging.config import dictConfig as logging_dictConfig
from pathlib import Path
from uuid import uuid4

from flask import Config as FlaskConfig
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from . import __version__
from .lib.error import OATHError
from .lib.fs_utils import ensure_dir
from .lib.logs import log_request_timedelta
from .lib.reply import sendError
from .lib.store.memory import MemorySecretStore, MemorySessionStore
from .model import SYS_EXIT_CODE, setup_db
from .settings import ConfigSchema, configs

log = logging.getLogger(__name__)

start_time = time.time()

OATHD_CFG_DEFAULT = "oathd.cfg"  # within app.root_path

ENV_PREFIX = "OATHD_"
ENV_PREFIX_LENGTH = len(ENV_PREFIX)

# controller module, url prefix and class name
AVAILABLE_CONTROLLERS = [
    ("oath", "/oath", "OathController"),
]

HEALTHCHECK_ENDPOINT = "healthcheck"

START_OATHD_COMMANDS = ["run", ""]  # we get `""` from gunicorn


class ConfigurationError(Exception):
    pass


class ExtFlaskConfig(FlaskConfig):
    """This is a variation on Flask's `Config` class which handles
    directory and file names specially. If the name of a configuration
    setting ends with `_DIR` (except `ROOT_DIR`) or `_FILE`, then if
    its value is not an absolute name (i.e., doesn't begin with a slash),
    the value of `ROOT_DIR` is prepended to it whenever the configuration
    setting is looked at. This means that relative directory and file names
    in the configuration are relative to `ROOT_DIR`.
    """

    config_schema: ConfigSchema = None

    class RelativePathName(str):
        """“Marker” that a string is really a relative path name."""

    def __init__(self, *args, **kwargs):
        """Initialise the oathd config mechanism. The `config_schema`
        parameter, which isn't part of Flask's `Config` mechanism, lets us
        associate a `ConfigSchema` object with this app (see `settings.py`);
        this can later be used to convert and verify configuration items
        as they are assigned.
        """
        self.set_schema(kwargs.pop("config_schema", None))
        super().__init__(*args, **kwargs)

    def set_schema(self, config_schema):
        """Use `config_schema` as the configuration schema for this app."""
        self.config_schema = config_schema

    def from_env_variables(self):
        """Take configuration settings from environment variables. E.g.,
        an environment variable called `OATHD_XYZ` can be used to set the
        `XYZ` configuration item, where its value will be appropriately
        converted from a string to whatever type `XYZ` uses (courtesy of
        `ConfigSchema.check_item()` by way of `self.__setitem__()`). This
        works only for configuration items that are listed in the
        configuration schema.
        """
        if self.config_schema is None:
            return
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX) and key != f"{ENV_PREFIX}CFG":
                config_key = key[ENV_PREFIX_LENGTH:]
                item = self.config_schema.find_item(config_key)
                if item is not None:
                    self[config_key] = value
                    log.debug("Set %s from environment variable.", config_key)

    def update(self, config_dict):
        """Take configuration variables from a dictionary. We don't want
        to use `dict.update()` because that won't pass the settings through
        `ExtFlaskConfig.__setitem__()`.
        """
        for key, value in config_dict.items():
            self[key] = value

    def __setitem__(self, key, value):
        """Implementation of `self[key] = value` with some additional magic.
        If a configuration schema is defined and `key` occurs in the schema,
        then use the schema to convert the `value` if necessary, and to
        check its validity if appropriate. Relative path names get the value
        of `ROOT_DIR` prepended to them when they are retrieved.
        """
        if self.config_schema is not None:
            value = self.config_schema.check_item(key, value)
        if (
            key.endswith(("_DIR", "_FILE"))
            and key != "ROOT_DIR"
            and value
            and value[0] != "/"
        ):
            value = ExtFlaskConfig.RelativePathName(value)
        super().__setitem__(key, value)

    def __getitem__(self, key):
        """Returns the value of a configuration item. Configuration items
        that represent relative path names for files or directories have
        the value of `ROOT_DIR` prepended.
        """
        value = super().__getitem__(key)
        if isinstance(value, ExtFlaskConfig.RelativePathName):
            root_dir = (
                super().__getitem__("ROOT_DIR")  # can't say 'self[…]' here
                if "ROOT_DIR" in self
                else "/ROOT_DIR_UNSET"
            )
            return os.path.join(root_dir, ".", value)
        return value

    def get(self, key, default=None):
        """We need to overload this so the relative-pathname hack will work
        even if people use `foo.get('bar')` instead of `foo['bar']`.
        """
        try:
            return self[key]
        except KeyError:
            log.debug(
                "Relying on `.get()` to set a default for '%s'. Instead, "
                "ensure that the schema contains a suitable default.",
                key,
            )
            return default

    def check_directories(self):
        BASE_DIR_SETTINGS = {"ROOT_DIR"}
        if self.config_schema is None:
            return False
        err = 0
        for key in self.config_schema.as_dict():
            if key not in BASE_DIR_SETTINGS:
                continue
            msg = ""
            dir_name = self[key]
            if os.path.exists(dir_name):
                s = os.stat(dir_name)
                if not stat.S_ISDIR(s.st_mode):
                    msg = "is not a directory"
            else:
                msg = "does not exist"
            if msg:
                print(
                    f"Error: Directory {dir_name} ({key}) {msg}",
                    file=sys.stderr,
                )
                err += 1
        if err:
            print("This is a fatal condition, aborting.", file=sys.stderr)
            sys.exit(SYS_EXIT_CODE)


class OATHApp(Flask):
    """
    The main oathd Flask application instance
    """

    def __init__(self):
        self.cli_cmd = os.environ.get("OATHD_CMD", "")
        self.config_class = ExtFlaskConfig  # our special `Config` class
        self.enabled_controllers: list[str] = []
        """Currently activated controller names"""

        # the stores which are handed to the verification engine
        self.secret_store = None
        self.session_store = None

        super().__init__(__name__)

    def start_session(self):
        """
        initialize the request metadata
        """
        if self.is_healthcheck_request():
            return

        # we add a unique request id to the request environment
        # so we can trace individual requests in the logging
        request.environ["REQUEST_ID"] = str(uuid4())
        request.environ["REQUEST_START_TIMESTAMP"] = datetime.now()

        # the parameters are not logged as they carry responses and keys
        log.debug(
            "Starting Request: [Request ID: %s] [%s] %s",
            request.environ.get("REQUEST_ID"),
            request.method,
            request.path,
        )

    def is_healthcheck_request(self) -> bool:
        return request.path.startswith(f"/{HEALTHCHECK_ENDPOINT}")

    def finalise_request(self, exc):
        if self.is_healthcheck_request():
            return

        log_request_timedelta(log)

        log.debug(
            "Finished Request: [Request ID: %s] [%s] %s",
            request.environ.get("REQUEST_ID"),
            request.method,
            request.path,
        )

    def getRequestParams(self):
        """
        Parses the request params from the request objects body / params
        dependent on request content_type.
        """
        request_params = {}
        try:
            if request.is_json:
                request_params = request.get_json(silent=True)
                if not isinstance(request_params, dict):
                    # only a json object carries named parameters
                    request_params = {}
            else:
                for key in request.values:
                    request_params[key] = request.values.get(key)
        except UnicodeDecodeError as exx:
            # the controller will reply the missing parameter
            log.warning("Failed to access request parameters: %r", exx)

        return request_params

    def database_needed(self) -> bool:
        """Does the app require a database?

        Only the sql store backend needs a database, and commands such as
        `oathd init` and `oathd config` need to be able to run without
        trying to connect to databases.
        """
        cli_cmd = getattr(self, "cli_cmd", "")
        return (
            cli_cmd not in ("init", "config")
            and self.config["STORE_BACKEND"] == "sql"
        )

    def setup_stores(self):
        """
        create the secret and the session store of the configured backend
        """
        backend = self.config["STORE_BACKEND"]

        if backend == "memory":
            self.secret_store = MemorySecretStore()
            self.session_store = MemorySessionStore()

        elif backend == "sql":
            # imported here as the sql stores require the database models
            from .lib.store.sql import SqlSecretStore, SqlSessionStore

            self.secret_store = SqlSecretStore()
            self.session_store = SqlSessionStore()

        else:
            raise ConfigurationError(f"unknown store backend {backend!r}")

        log.debug("using the %s store backend", backend)

    def setup_controllers(self):
        """
        Initialise controllers and their routing
        """
        for ctrl_name, url_prefix, ctrl_class_name in AVAILABLE_CONTROLLERS:
            self.enable_controller(ctrl_name, url_prefix, ctrl_class_name)

    def enable_controller(self, ctrl_name, url_prefix=None, ctrl_class_name=None):
        """
        Initialise an individual controller and its routing

        :param ctrl_name: The name of the controller
        :param url_prefix: Alternative url prefix. Defaults to /`ctrl_name`
        :param ctrl_class_name: Name of controller class to load. Defaults to
                                CtrlNameController
        """
        if not ctrl_class_name:
            # "foobar" => "FoobarController"
            ctrl_class_name = ctrl_name.title() + "Controller"

        mod = importlib.import_module("." + ctrl_name, "oathd.controllers")
        cls = getattr(mod, ctrl_class_name, None)
        if cls is None:
            msg = f"{ctrl_name} does not define the '{ctrl_class_name}' class"
            raise ConfigurationError(msg)

        self.register_blueprint(
            cls(ctrl_name), url_prefix=url_prefix or "/" + ctrl_name
        )
        self.enabled_controllers.append(ctrl_name)


def init_logging(app: OATHApp):
    """Sets up logging for oathd."""

    if app.config["LOG_CONFIG"] is None:
        app.config["LOG_CONFIG"] = {
            "version": 1,
            "disable_existing_loggers": True,
            "handlers": {
                "console": {
                    "level": app.config["LOG_CONSOLE_LEVEL"],
                    "class": "logging.StreamHandler",
                    "formatter": "oathd_console",
                },
                "file": {
                    "level": app.config["LOG_FILE_LEVEL"],
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "oathd_file",
                    "filename": os.path.join(
                        app.config["LOG_FILE_DIR"], app.config["LOG_FILE_NAME"]
                    ),
                    "maxBytes": app.config["LOG_FILE_MAX_LENGTH"],
                    "backupCount": app.config["LOG_FILE_MAX_VERSIONS"],
                },
            },
            "formatters": {
                "oathd_file": {
                    "format": app.config["LOG_FILE_LINE_FORMAT"],
                },
                "oathd_console": {
                    "format": app.config["LOG_CONSOLE_LINE_FORMAT"],
                },
            },
            "loggers": {
                "oathd": {
                    "handlers": ["console", "file"],
                    "level": app.config["LOG_LEVEL"],
                    "propagate": True,
                },
            },
        }

    if app.cli_cmd != "config":
        ensure_dir(app, "log", "LOG_FILE_DIR", mode=0o770)
        logging_dictConfig(app.config["LOG_CONFIG"])


def _configure_app(
    app: OATHApp,
    config_name: str | None = None,
    config_extra: dict | None = None,
):
    """
    Testing the configuration mechanism is a lot easier if it can be
    invoked separately from `create_app()`, which does a lot of other
    stuff, too. Therefore we have pulled out all the configuration-related
    code from `create_app()` into this function.
    """

    # Use production as default environment if not specified
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "production")

    app.config.from_object(configs[config_name])
    configs[config_name].init_app(app)

    # Take list of configuration files from `OATHD_CFG` if defined,
    # otherwise assume `OATHD_CFG_DEFAULT`.

    root_path = Path(app.config.root_path)

    oathd_cfg_files = os.environ.get("OATHD_CFG", None)
    if oathd_cfg_files is None:
        oathd_cfg_files = OATHD_CFG_DEFAULT

    # Read the configuration files.
    #
    # A `-` at the start of a file name (which will not be considered
    # part of the actual file name) suppresses the warning if the file
    # could not be read.

    if oathd_cfg_files:
        for fn in oathd_cfg_files.split(":"):
            warn_on_error = True
            if fn and fn[0] == "-":
                warn_on_error = False
                fn = fn[1:]
            fn = root_path / fn  # better message
            if fn.is_dir():
                fn /= "*.cfg"
            for fn0 in sorted(list(fn.resolve().parent.glob(fn.name)) or [str(fn)]):
                if app.config.from_pyfile(fn0, silent=True):
                    print(f"Configuration loaded from {fn0!s}", file=sys.stderr)
                elif warn_on_error:
                    print(
                        f"Configuration from {fn0!s} failed"
                        " (check location and permissions)",
                        file=sys.stderr,
                    )

    if config_extra is not None:
        app.config.update(config_extra)

    # Check the environment for further settings

    app.config.from_env_variables()

    if getattr(app, "cli_cmd", "") != "config":
        app.config.check_directories()


def _setup_error_handlers(app: OATHApp):
    """Set up Flask error handlers to handle all Exceptions."""

    @app.errorhandler(OATHError)
    def oath_error_handler(oathError):
        """
        Pass OATHError exceptions to sendError

        If Flask receives an exception which is derived from OATHError,
        this handler will be called so that an error response can be
        returned to the user.
        """
        log.info("request failed: %r", oathError)
        return sendError(oathError)

    @app.errorhandler(HTTPException)
    def httpexception_handler(httpException):
        """
        Simply return the error response in case of an HTTPException

        Usecase: Do not trigger `default_error_handler` for e.g. 404 errors
        """
        return httpException

    @app.errorhandler(Exception)
    def default_error_handler(exception):
        """
        Default error handler

        Used when no other handler handles the Exception.
        Logs the Exception with backtrace and returns our error response.
        """
        log.exception(exception)
        return sendError(exception)


def create_app(config_name=None, config_extra=None):
    """
    Generate a new instance of the Flask app.

    This generates and configures the main application instance. Testing
    environments can use `config_extra` to provide extra configuration values
    such as a temporary database URL.

    :param config_name: The name of the configuration to load from settings.py
    :param config_extra: Additional configuration override values

    :return: The configured Flask application instance
    """
    app = OATHApp()

    _configure_app(app, config_name, config_extra)

    init_logging(app)

    if app.cli_cmd in START_OATHD_COMMANDS:
        log.info("oathd %s starting ...", __version__)

    with app.app_context():
        setup_db(app)
        app.setup_stores()

    if not app.testing and app.cli_cmd not in START_OATHD_COMMANDS:
        return app

    app.before_request(app.start_session)
    app.teardown_request(app.finalise_request)

    app.setup_controllers()
    _setup_error_handlers(app)

    app.add_url_rule(
        f"/{HEALTHCHECK_ENDPOINT}/status", HEALTHCHECK_ENDPOINT, healthcheck
    )

    return app


def healthcheck():
    uptime = time.time() - start_time
    return jsonify(status="alive", version=__version__, uptime=uptime)
