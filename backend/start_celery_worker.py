#!/usr/bin/env python3
"""Start the Celery import worker with suppressed superuser warnings."""

import sys
import warnings

from celery.bin import worker

warnings.filterwarnings('ignore', category=UserWarning, message='.*superuser privileges.*')
warnings.filterwarnings('ignore', category=RuntimeWarning, message='.*superuser privileges.*')

from stockroom.core.logging_config import configure_logging  # noqa: E402
from stockroom.workers.celery_app import celery_app  # noqa: E402

if __name__ == '__main__':
    configure_logging()
    worker_app = worker.worker(app=celery_app)

    sys.argv = [
        'celery',
        '-A', 'stockroom.workers.celery_app.celery_app',
        'worker',
        '--loglevel=info',
        '--queues=imports,celery',
        '--pool=solo',
        '--without-mingle',
        '--without-gossip',
    ] + sys.argv[1:]

    worker_app.run()
