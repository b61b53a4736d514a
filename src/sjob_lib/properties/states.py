# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from enum import Enum
from typing import Self

from sjob_lib.core.config import CFG
from sjob_lib.core.logger import get_logger

logger = get_logger(__name__)


class BatchState(Enum):
    """
    State of the job according to Slurm, reduced to the states sjob distinguishes.
    """

    QUEUED = 1
    HELD = 2
    RUNNING = 3
    EXITING = 4
    SUSPENDED = 5
    FINISHED = 6
    FAILED = 7
    CANCELLED = 8
    UNKNOWN = 9

    def __str__(self) -> str:
        """
        Return the lowercase string representation of the enum variant.

        Returns:
            str: The name of the batch state in lowercase.
        """
        return self.name.lower()

    @classmethod
    def _codeToState(cls) -> dict[str, str]:
        """
        Internal mapping from one-letter codes to batch state names.

        Returns:
            dict[str, str]: Mapping of codes to corresponding batch state names.
        """
        return {
            "Q": "queued",
            "H": "held",
            "R": "running",
            "E": "exiting",
            "S": "suspended",
            "F": "finished",
            "X": "failed",
            "C": "cancelled",
        }

    @classmethod
    def fromCode(cls, code: str) -> Self:
        """
        Convert a one-letter sjob code to a BatchState enum variant.

        Args:
            code (str): One-letter code representing the state.

        Returns:
            BatchState: Corresponding enum variant, or UNKNOWN if the code is invalid.
        """
        if not (name := cls._codeToState().get(code.upper())):
            return cls.UNKNOWN

        return cls[name.upper()]

    def toCode(self) -> str:
        """
        Return the one-letter code corresponding to this BatchState.

        Returns:
            str: One-letter code representing the batch state. Returns '?' if unknown.
        """
        for k, v in self._codeToState().items():
            if v.upper() == self.name:
                return k

        return "?"

    @classmethod
    def fromSlurm(cls, raw_state: str, reason: str | None = None) -> Self:
        """
        Convert a job state reported by Slurm to a BatchState.

        Both the long state names (as reported by `scontrol`, `sacct`, and `squeue -o %T`)
        and the compact codes (as reported by `squeue -o %t`) are supported.
        Additional information following the state (e.g., 'CANCELLED by 1234')
        is ignored.

        A pending job waiting for a dependency or held by the user
        or an administrator is considered to be held.

        Args:
            raw_state (str): State of the job according to Slurm.
            reason (str | None): Reason for the job state, if available.

        Returns:
            BatchState: The corresponding state, or UNKNOWN if the state is not recognized.
        """
        words = raw_state.strip().upper().split()
        if not words:
            return cls.UNKNOWN

        # sacct marks states of requeued jobs with a trailing '+'
        state_name = words[0].rstrip("+")
        state = _SLURM_STATES.get(state_name) or _SLURM_CODES.get(state_name)
        if state is None:
            logger.debug(f"Unknown Slurm job state '{raw_state}'.")
            return cls.UNKNOWN

        if state == cls.QUEUED and reason and _isHoldReason(reason):
            return cls.HELD

        return state

    def isCompleted(self) -> bool:
        """Return True if the job will no longer change its state."""
        return self in {BatchState.FINISHED, BatchState.FAILED, BatchState.CANCELLED}

    def isActive(self) -> bool:
        """Return True if the job is waiting in the queue or holds resources."""
        return self in {
            BatchState.QUEUED,
            BatchState.HELD,
            BatchState.RUNNING,
            BatchState.SUSPENDED,
            BatchState.EXITING,
        }

    @property
    def color(self) -> str:
        """
        Return the display color associated with this BatchState.

        Returns:
            str: A string representing the color for presentation purposes.
        """
        return getattr(CFG.state_colors, self.name.lower())


# Slurm job states written in full.
_SLURM_STATES: dict[str, BatchState] = {
    "BOOT_FAIL": BatchState.FAILED,
    "CANCELLED": BatchState.CANCELLED,
    "COMPLETED": BatchState.FINISHED,
    "COMPLETING": BatchState.EXITING,
    "CONFIGURING": BatchState.RUNNING,
    "DEADLINE": BatchState.FAILED,
    "FAILED": BatchState.FAILED,
    "NODE_FAIL": BatchState.FAILED,
    "OUT_OF_MEMORY": BatchState.FAILED,
    "PENDING": BatchState.QUEUED,
    "PREEMPTED": BatchState.FAILED,
    "RESV_DEL_HOLD": BatchState.HELD,
    "REQUEUE_FED": BatchState.QUEUED,
    "REQUEUE_HOLD": BatchState.HELD,
    "REQUEUED": BatchState.QUEUED,
    "RESIZING": BatchState.RUNNING,
    "REVOKED": BatchState.CANCELLED,
    "RUNNING": BatchState.RUNNING,
    "SIGNALING": BatchState.EXITING,
    "SPECIAL_EXIT": BatchState.FAILED,
    "STAGE_OUT": BatchState.EXITING,
    "STOPPED": BatchState.SUSPENDED,
    "SUSPENDED": BatchState.SUSPENDED,
    "TIMEOUT": BatchState.FAILED,
}

# Compact job state codes used by squeue.
_SLURM_CODES: dict[str, BatchState] = {
    "BF": BatchState.FAILED,
    "CA": BatchState.CANCELLED,
    "CD": BatchState.FINISHED,
    "CF": BatchState.RUNNING,
    "CG": BatchState.EXITING,
    "DL": BatchState.FAILED,
    "F": BatchState.FAILED,
    "NF": BatchState.FAILED,
    "OOM": BatchState.FAILED,
    "PD": BatchState.QUEUED,
    "PR": BatchState.FAILED,
    "R": BatchState.RUNNING,
    "RD": BatchState.HELD,
    "RF": BatchState.QUEUED,
    "RH": BatchState.HELD,
    "RQ": BatchState.QUEUED,
    "RS": BatchState.RUNNING,
    "RV": BatchState.CANCELLED,
    "S": BatchState.SUSPENDED,
    "SE": BatchState.FAILED,
    "SI": BatchState.EXITING,
    "SO": BatchState.EXITING,
    "ST": BatchState.SUSPENDED,
    "TO": BatchState.FAILED,
}


def _isHoldReason(reason: str) -> bool:
    """Return True if the pending reason means that the job cannot start on its own."""
    reason = reason.lower()
    return "dependency" in reason or "held" in reason or reason.endswith("hold")
