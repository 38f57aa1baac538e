"""Defines the database models and classes for persistent covariance history storage.

This module holds common functions and attributes used in many data modules.
"""

from __future__ import annotations

# Standard Library Imports
from os import getcwd, makedirs
from os.path import abspath, dirname, exists, join, normpath

# Local Imports
from ..common import pathSafeTime
from ..common.logger import odcovLogError
from .covariance_epoch import CovarianceEpoch
from .data_interface import CovarianceDatabase

__all__ = [
    "CovarianceDatabase",
    "CovarianceEpoch",
    "createDatabasePath",
]


def createDatabasePath(path, importer=False):
    """Create a valid path for the database.

    Args:
        path (``str``): path-like string to the desired database file location.
        importer (``bool``, optional): whether the database file is pre-existing and only read.
            Defaults to ``False``.

    Returns:
        ``str``: properly formatted database path. Defaults to timestamped path
            in **db** directory if ``None`` is passed.
    """
    if path:
        db_path = f"sqlite:///{normpath(abspath(path))}"
        directory = abspath(dirname(path))
        if not importer:
            if exists(abspath(path)):
                msg = f"Cannot overwrite existing database: {db_path}"
                odcovLogError(msg)
                raise FileExistsError(path)

            if not exists(directory):
                makedirs(directory)

    else:
        directory = abspath(join(getcwd(), "db"))
        if not exists(directory):
            makedirs(directory)
        db_path = f"sqlite:///{directory}/odcov_{pathSafeTime()}.sqlite3"

    return db_path
