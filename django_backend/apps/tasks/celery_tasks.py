import logging

from celery import shared_task

from apps.tasks.consistency import drifted_columns, renumber_column

logger = logging.getLogger(__name__)


@shared_task
def renumber_column_task(project_id, status):
    """
    Renumber one column densely. Queued when a read sees duplicate orders.
    Returns the number of tasks whose order changed.
    """
    return renumber_column(project_id, status)


@shared_task
def repair_column_drift():
    """
    Maintenance pass: renumber every column whose orders are not 0..N-1.
    Returns the number of columns repaired.
    """
    repaired = 0
    for project_id, status in drifted_columns():
        renumber_column(project_id, status)
        repaired += 1

    if repaired:
        logger.info("Drift repair renumbered %d column(s)", repaired)
    return repaired
