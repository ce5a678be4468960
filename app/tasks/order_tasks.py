# app/tasks/order_tasks.py

from celery import shared_task
import structlog
from app.db.session import SessionLocal
from app.services.order_service import finalize_stale_carts as finalize_stale_carts_service

logger = structlog.get_logger()


@shared_task(bind=True, max_retries=3)
def finalize_stale_carts(self):
    """
    Complete scan carts left open from previous days so the next scan
    starts a fresh order. Runs periodically via Celery Beat.
    """
    db = SessionLocal()
    try:
        finalized = finalize_stale_carts_service(db)
        logger.info("stale_carts_finalized", count=finalized)
        return finalized
    except Exception as exc:
        raise self.retry(exc=exc, countdown=60)
    finally:
        db.close()
