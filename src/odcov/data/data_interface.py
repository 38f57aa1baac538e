"""Defines the :class:`.CovarianceDatabase` data interface class."""

from __future__ import annotations

# Standard Library Imports
from contextlib import contextmanager
from traceback import format_exc
from typing import TYPE_CHECKING

# Third Party Imports
from sqlalchemy import create_engine, distinct
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, sessionmaker
from sqlalchemy.pool import StaticPool

# Local Imports
from ..common.behavioral_config import BehavioralConfig
from ..common.logger import Logger
from ..estimation.results import CovarianceHistory
from .covariance_epoch import CovarianceEpoch
from .table_base import Base

if TYPE_CHECKING:
    # Standard Library Imports
    from typing import Final

    # Local Imports
    from .table_base import _Base


class CovarianceDatabase:
    """Stores covariance histories of one or more post-processing runs."""

    VALID_DATA_TYPES: Final[dict[str, type[_Base]]] = {
        CovarianceEpoch.__tablename__: CovarianceEpoch,
    }

    SQLITE_PREFIX = "sqlite://"

    def __init__(self, db_path=None, drop_tables=(), logger=None, verbose_echo=False):
        """Create the database tables based on :attr:`.VALID_DATA_TYPES`.

        Args:
            db_path (``str``, optional): SQLAlchemy-accepted string denoting what database implementation
                to use and where the database is located. Defaults to the configured ``DatabasePath``.
            drop_tables (``iterable``, optional): table names to be dropped at construction, for
                re-using a pre-existing database without its old data. Defaults to an empty tuple.
            logger (:class:`.Logger`, optional): Previously instantiated logging object to use. Defaults
                to ``None``, resulting in a new :class:`.Logger` instance being instantiated.
            verbose_echo (``bool``, optional): Flag that if set ``True``, will tell the SQLAlchemy
                engine to output the raw SQL statements it runs. Defaults to ``False``.
        """
        self.logger = logger
        if self.logger is None:
            self.logger = Logger("odcov")

        if not db_path:
            db_path = BehavioralConfig.getConfig().database.DatabasePath

        if db_path.startswith(self.SQLITE_PREFIX):
            self.engine = create_engine(
                db_path,
                echo=verbose_echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(db_path, echo=verbose_echo)

        self.resetData(tables=drop_tables)
        self.session_factory = sessionmaker(bind=self.engine)
        self.logger.debug(f"Database path: {db_path}")

    @contextmanager
    def _getSessionScope(self, **kwargs):
        """Provide a transactional scope around a series of operations.

        Yields:
            :class:`sqlalchemy.orm.session.Session`: establishes all conversations with DB
        """
        current_session = self.session_factory(**kwargs)
        try:
            yield current_session
            current_session.commit()
        except SQLAlchemyError:
            self.logger.error(f"Exception thrown in `::getSessionScope()` by {self}: \n{format_exc()}")
            current_session.rollback()
            raise
        finally:
            current_session.close()

    def resetData(self, tables: tuple = ()) -> None:
        """Drop given tables of the database, then make sure all valid tables exist.

        Raises:
            ValueError: if a table name is not one of :attr:`.VALID_DATA_TYPES`.
        """
        for table_name in tables:
            if (data_type := self.VALID_DATA_TYPES.get(table_name)) is None:
                err = f"No such table: {table_name!r}"
                raise ValueError(err)

            data_type.__table__.drop(self.engine, checkfirst=True)
            self.logger.warning(f"Dropped table {table_name!r}")

        Base.metadata.create_all(self.engine, checkfirst=True)

    def insertData(self, *args) -> None:
        """Insert already-constructed :attr:`.VALID_DATA_TYPES` objects into the database.

        Raises:
            TypeError: if an argument is not a valid data object.
            ValueError: if called without arguments.
        """
        if not args:
            raise ValueError("Cannot call `CovarianceDatabase.insertData()` without arguments.")

        for arg in args:
            if not isinstance(arg, tuple(self.VALID_DATA_TYPES.values())):
                self.logger.error(f"[CovarianceDatabase.insertData()] Not a valid data object: {arg!r}")
                raise TypeError(arg)

        with self._getSessionScope() as session:
            session.add_all(args)

    def getData(self, query: Query, multi=True):
        """Retrieve data object(s) that match the given Query object.

        Args:
            query (`sqlalchemy.orm.Query`): pre-constructed query used to retrieve matching data.
            multi (``bool``, optional): flag indicating whether to return multiple results.
                Defaults to ``True``.

        Returns:
            ``VALID_DATA_TYPES``: data object or list of data objects matching the query
        """
        if not isinstance(query, Query):
            self.logger.error(f"[CovarianceDatabase.getData()] Not a `sqlalchemy.orm.Query`: {type(query)!r}")
            raise TypeError(query)

        # [NOTE]: The context manager pattern isn't used here because of the lazy loading
        #   functionality of the ORM, which detaches objects once the session closes.
        cur_session = self.session_factory()
        try:
            if multi:
                return query.with_session(cur_session).all()
            return query.with_session(cur_session).first()

        except SQLAlchemyError:
            self.logger.error(f"Exception thrown in `CovarianceDatabase.getData()`: \n{format_exc()}")
            raise

        finally:
            cur_session.close()

    def deleteData(self, query: Query) -> int:
        """Delete object(s) matching `query`, returning how many were deleted."""
        if not isinstance(query, Query):
            self.logger.error(f"[CovarianceDatabase.deleteData()] Not a `sqlalchemy.orm.Query`: {type(query)!r}")
            raise TypeError(query)

        with self._getSessionScope() as session:
            for result in query.with_session(session).all():
                session.delete(result)
            return len(session.deleted)

    def saveCovarianceHistory(self, history: CovarianceHistory, run_label: str) -> int:
        """Store every epoch of `history` under `run_label`.

        Returns:
            ``int``: number of epochs saved.
        """
        epochs = [
            CovarianceEpoch.fromCovariance(
                run_label,
                time,
                covariance,
                num_observations=history.getNumObservations(time),
            )
            for time, covariance in history.items()
        ]
        if epochs:
            self.insertData(*epochs)
        self.logger.info(f"Saved {len(epochs)} covariance epochs for run {run_label!r}")
        return len(epochs)

    def loadCovarianceHistory(self, run_label: str) -> CovarianceHistory:
        """Rebuild the :class:`.CovarianceHistory` stored under `run_label`."""
        query = Query(CovarianceEpoch).filter(CovarianceEpoch.run_label == run_label)
        epochs = self.getData(query.order_by(CovarianceEpoch.time))
        num_observations = {
            epoch.time: epoch.num_observations for epoch in epochs if epoch.num_observations is not None
        }
        return CovarianceHistory(
            {epoch.time: epoch.covariance for epoch in epochs},
            num_observations=num_observations,
        )

    def getRunLabels(self) -> list[str]:
        """Return the labels of all stored covariance histories."""
        return sorted(label for (label,) in self.getData(Query(distinct(CovarianceEpoch.run_label))))
