import signal
import threading
import time
from types import FrameType

from app.config.settings import Settings
from app.database.connection import get_connection
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> dispatch, sleeping while the queue is empty.

    A job in progress always finishes; SIGTERM or Ctrl+C stop the loop
    before the next claim.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._stopping = False

    def stop(self) -> None:
        """Ask the loop to exit before claiming another job."""
        self._stopping = True

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs until stopped or interrupted.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        previous_handler = None
        if threading.current_thread() is threading.main_thread():
            previous_handler = signal.signal(signal.SIGTERM, self._on_sigterm)
        Log.info("Worker started, polling for OCR jobs")
        jobs_done = 0
        try:
            while not self._stopping:
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No OCR jobs available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGTERM, previous_handler)
        Log.info(f"Worker shutting down after {jobs_done} job(s)")

    def _on_sigterm(self, signum: int, frame: FrameType | None) -> None:
        _ = signum, frame
        Log.info("SIGTERM received, finishing current job")
        self.stop()

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
