# Copyright 2024-2025 pydss authors. All rights reserved.

import logging

from pydss.core.controls import set_verbose
from pydss.core.engine import Job
from pydss.core.session import Session

logger = logging.getLogger(__name__)


def run_job(session: Session, job: Job, verbose: bool = False) -> int:
    """Drive one engine job and return the global status ``INFOG(1)``.

    The per-process status ``INFO(1)`` stays in the state record for callers
    that need to stop a sequence of jobs early.
    """
    state = session.engine_state

    set_verbose(state, verbose)
    state.job = int(job)
    session.engine.run(state)

    status = state.infog(1)
    if status != 0:
        logger.debug("Engine job %s returned INFOG(1) = %d", job.name, status)

    return status


def local_error(session: Session) -> bool:
    """True if the last job failed on this process."""
    return session.engine_state.info(1) != 0


def last_job(session: Session) -> int:
    """Code of the job most recently handed to the engine, 0 before any."""
    return session.engine_state.job
