"""
Score recalculation trigger.

After an activity is logged the student's contribution score is refreshed
in the background. Dispatch is one-way: the caller never waits for the job
and never learns whether it succeeded. Nothing is retried.
"""
import concurrent.futures
import logging

import requests

from fairgrade.services.scoring import recalculate_scores

logger = logging.getLogger(__name__)


class RecalculationQueue:
    """Fire-and-forget queue running a recalculation job on worker threads."""

    def __init__(self, job, max_workers=2):
        self._job = job
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="recalc"
        )

    def dispatch(self, project_id, student_id):
        """Queue a recalculation. Returns False if it could not be queued."""
        try:
            self._executor.submit(self._run, project_id, student_id)
        except RuntimeError as e:
            logger.warning("Recalculation for %s/%s dropped: %s", project_id, student_id, e)
            return False
        return True

    def _run(self, project_id, student_id):
        try:
            self._job(project_id, student_id)
        except Exception:
            logger.exception("Recalculation failed for project %s, student %s", project_id, student_id)

    def shutdown(self, wait=True):
        self._executor.shutdown(wait=wait)


class DisabledQueue:
    """Used when RECALC_MODE=off."""

    def dispatch(self, project_id, student_id):
        logger.debug("Recalculation disabled, skipping %s/%s", project_id, student_id)
        return False

    def shutdown(self, wait=True):
        pass


def local_job(store_factory):
    """Recalculate in-process with a store of the job's own."""
    def job(project_id, student_id):
        recalculate_scores(store_factory(), project_id, student_id)
    return job


def remote_job(supabase_url, service_key, timeout=10):
    """Invoke the deployed calculate-scores function over HTTP."""
    endpoint = supabase_url.rstrip("/") + "/functions/v1/calculate-scores"

    def job(project_id, student_id):
        resp = requests.post(
            endpoint,
            headers={
                "Authorization": "Bearer " + service_key,
                "Content-Type": "application/json",
            },
            json={"project_id": project_id, "student_id": student_id},
            timeout=timeout,
        )
        resp.raise_for_status()
    return job


def build_queue(cfg, store_factory):
    """Build the recalculation queue selected by ``cfg.recalc_mode``."""
    if cfg.recalc_mode == "off":
        return DisabledQueue()
    if cfg.recalc_mode == "remote":
        job = remote_job(cfg.supabase_url, cfg.supabase_service_key, cfg.recalc_timeout)
    else:
        job = local_job(store_factory)
    return RecalculationQueue(job, max_workers=cfg.recalc_workers)
