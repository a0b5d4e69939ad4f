from unittest.mock import MagicMock, patch

from app.database.models import JobRecord
from app.processor.pipeline import PipelineContext
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def _make_worker() -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with mocked dependencies."""
    mock_repo = MagicMock()
    mock_runner = MagicMock()
    settings = MagicMock(job_poll_interval_seconds=1)
    worker = Worker(mock_repo, mock_runner, settings)
    return worker, mock_repo, mock_runner


def _make_job(job_id: int = 1) -> JobRecord:
    return JobRecord(id=job_id, archive_uuid="abc-123", status="processing", attempts=0)


class TestWorkerDispatch:
    def test_dispatches_job_to_runner(self) -> None:
        worker, _repo, mock_runner = _make_worker()
        job = _make_job()

        with patch.object(worker, "_try_claim_job", side_effect=[job, KeyboardInterrupt]):
            worker.run()

        mock_runner.run.assert_called_once_with(job)

    def test_stops_after_max_jobs(self) -> None:
        worker, _repo, mock_runner = _make_worker()

        with patch.object(
            worker, "_try_claim_job", side_effect=[_make_job(1), _make_job(2), _make_job(3)]
        ):
            done = worker.run(max_jobs=2)

        assert done == 2
        assert mock_runner.run.call_count == 2


class TestWorkerIdle:
    def test_waits_poll_interval_when_no_job(self) -> None:
        worker, _repo, _runner = _make_worker()

        with (
            patch.object(worker, "_try_claim_job", side_effect=[None, KeyboardInterrupt]),
            patch.object(worker._stopping, "wait") as mock_wait,
        ):
            worker.run()

        mock_wait.assert_called_once_with(1)

    def test_database_error_counts_as_no_job(self) -> None:
        worker, mock_repo, _runner = _make_worker()
        mock_repo.claim_next_job.side_effect = RuntimeError("db down")

        with patch("app.worker.worker.get_connection") as mock_conn:
            mock_conn.return_value.__enter__.return_value = MagicMock()
            assert worker._try_claim_job() is None


class TestWorkerShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        worker, _repo, _runner = _make_worker()

        with patch.object(worker, "_try_claim_job", side_effect=KeyboardInterrupt):
            assert worker.run() == 0

    def test_stop_ends_loop_after_current_job(self) -> None:
        worker, _repo, mock_runner = _make_worker()
        mock_runner.run.side_effect = lambda _job: worker.stop()

        with patch.object(worker, "_try_claim_job", return_value=_make_job()):
            done = worker.run()

        assert done == 1


class TestWorkerResilience:
    def test_database_error_while_completing_a_job_keeps_polling(self) -> None:
        mock_processor = MagicMock()
        mock_processor.process.return_value = PipelineContext(archive_uuid="abc-123", job_id=1)
        mock_repo = MagicMock()
        mock_repo.mark_done.side_effect = RuntimeError("connection lost")
        mock_repo.increment_attempts.side_effect = RuntimeError("connection lost")
        settings = MagicMock(job_poll_interval_seconds=1, max_job_attempts=3)
        worker = Worker(mock_repo, JobRunner(mock_processor, mock_repo, settings), settings)

        with patch.object(worker, "_try_claim_job", side_effect=[_make_job(1), _make_job(2)]):
            done = worker.run(max_jobs=2)

        assert done == 2
        assert mock_processor.process.call_count == 2
