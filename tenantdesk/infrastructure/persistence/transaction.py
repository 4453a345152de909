"""
Service de transaction SQLModel.

La session courante du thread est partagée avec les repositories. Pendant
une transaction, les repositories se contentent de flush() ; le service
valide une seule fois à la fin de l'unité de travail, ou annule tout en
cas d'erreur. Les unités imbriquées rejoignent l'unité englobante.
"""

from typing import Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tenantdesk.core.exceptions import RepositoryError
from tenantdesk.core.ports.services import ITransactionService
from tenantdesk.core.value_objects.context import RequestContext

R = TypeVar("R")

# Profondeur de transaction stockée dans Session.info
TX_DEPTH_KEY = "tenantdesk.tx_depth"


def in_transaction(session: Session) -> bool:
    """True si une unité de travail est ouverte sur la session."""
    return session.info.get(TX_DEPTH_KEY, 0) > 0


class SQLModelTransactionService(ITransactionService):
    def __init__(self, session_provider: Callable[[], Session]) -> None:
        """
        Args :
            session_provider : Retourne la session du thread courant (scoped_session)
        """
        self._session_provider = session_provider

    def supports_transactions(self) -> bool:
        return True

    def execute_in_transaction(self, ctx: RequestContext, fn: Callable[[RequestContext], R]) -> R:
        session = self._session_provider()
        depth = session.info.get(TX_DEPTH_KEY, 0)
        session.info[TX_DEPTH_KEY] = depth + 1
        try:
            try:
                result = fn(ctx)
            except Exception:
                if depth == 0:
                    session.rollback()
                    logger.debug("Transaction annulée")
                raise
            if depth == 0:
                try:
                    session.commit()
                except SQLAlchemyError as err:
                    session.rollback()
                    raise RepositoryError(f"transaction commit failed: {err}") from err
            return result
        finally:
            session.info[TX_DEPTH_KEY] = depth
