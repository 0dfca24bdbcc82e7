import signal

from tuplemr.services.tuple_space_client import RemoteTupleSpace
from tuplemr.worker.worker_engine import WorkerEngine
from tuplemr.utils.config import get_worker_settings
from tuplemr.utils.logger import setup_logger


class TupleMRWorker:
    """Main TupleMR worker process."""

    def __init__(self):
        self.settings = get_worker_settings()
        self.logger = setup_logger("TupleMR Worker", self.settings.log_level)
        self.tuple_space = RemoteTupleSpace(
            f"http://{self.settings.master_host}:{self.settings.master_port}",
            request_timeout=self.settings.request_timeout,
        )
        self.worker_engine = WorkerEngine(self.tuple_space, worker_id=self.settings.worker_id)

    def setup_signal_handlers(self):
        """Install SIGINT/SIGTERM handlers for an orderly shutdown."""
        def signal_handler(sig, frame):
            self.logger.info(f"Received signal {sig}")
            self.worker_engine.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def serve(self):
        self.logger.info(f"Starting TupleMR Worker {self.settings.worker_id}")
        try:
            self.worker_engine.run()
        finally:
            self.tuple_space.close()
            self.logger.info("TupleMR Worker shutdown complete")


def main():
    worker = TupleMRWorker()
    worker.setup_signal_handlers()
    worker.serve()


if __name__ == "__main__":
    main()
