# -*- coding: utf-8 -*-
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


import os

from setuptools import find_packages, setup

from oathd import __version__

# Taken from kennethreitz/requests/setup.py
package_directory = os.path.realpath(os.path.dirname(__file__))

# oathd runtime dependencies
install_requirements = [
    "Flask>=2.3",
    "werkzeug>=2.3",
    "SQLAlchemy>=1.4.18",
    "flask-sqlalchemy>=3",
    "click",
]

# Additional packages useful to improve and guarantee
# code quality
# > pip install -e ".[code_quality]"
code_quality_requirements = [
    "pylint",
    "black",
    "pre-commit",
    "mypy",
    "isort",
]

# install with
# > pip install -e ".[postgres]"
postgres_requirements = [
    # 'psycopg2' would require to compile some sources
    "psycopg2-binary",
]

# install with
# > pip install -e ".[mysql]"
mysql_requirements = [
    "mysqlclient",
]

# Requirements needed to run all the tests
# install with
# > pip install -e ".[test]"
test_requirements = [
    "pytest",
    "pytest-cov",
    "pytest-flask",
    "freezegun",
    "coverage",
]

# all packages that are required for production setup of oathd
# install with
# > pip install -e ".[prod]"
production_requirements = ["gunicorn"]

# all packages that are required during development of oathd
# install with
# > pip install -e ".[develop]"
development_requirements = test_requirements + code_quality_requirements


with open(os.path.join(package_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="oathd",
    version=__version__,
    description=(
        "Verification service for OATH one time passwords "
        "(OCRA, HOTP and TOTP)"
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="netgo software GmbH",
    license="AGPL v3, (C) netgo software GmbH",
    author_email="info@linotp.de",
    url="https://www.linotp.org",
    python_requires=">=3.10",
    install_requires=install_requirements,
    extras_require={
        "postgres": postgres_requirements,
        "mysql": mysql_requirements,
        "test": test_requirements,
        "code_quality": code_quality_requirements,
        "develop": development_requirements,
        "prod": production_requirements,
    },
    packages=find_packages(include=["oathd", "oathd.*"]),
    include_package_data=True,
    scripts=[],
    classifiers=[
        "License :: OSI Approved :: GNU Affero General Public License v3",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.11",
        "Topic :: Internet",
        "Topic :: Security",
        "Topic :: System :: Systems Administration :: Authentication/Directory",
        "Framework :: Flask",
    ],
    zip_safe=False,
    entry_points={
        "console_scripts": [
            "oathd = oathd.cli:main",  # oathd command line interface
        ],
    },
)
