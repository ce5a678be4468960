from sqlalchemy.orm import Session
import structlog

logger = structlog.get_logger()


class UnitOfWork:
    """Transaction scope for one order operation.

    Commits when the block exits cleanly; any exception raised inside the
    block (or by the commit itself) rolls the session back before it
    propagates, so no partial writes survive.
    """

    def __init__(self, session: Session, name: str = "unit_of_work"):
        self.session = session
        self.name = name

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
            return False
        try:
            self.session.commit()
        except Exception:
            self.rollback()
            raise
        return False

    def flush(self) -> None:
        self.session.flush()

    def rollback(self) -> None:
        self.session.rollback()
        logger.debug("unit_of_work_rolled_back", unit=self.name)
