"""Worker payloads.

A worker is the component that handles a single event on behalf of a
project. Projects carry a worker template; events carry the worker spawned
for them together with its status and jobs.
"""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import Field

from .container import ContainerSpec
from .job import Job
from .meta import WireModel

DEFAULT_SCRIPT_NAME = "brigade.js"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class WorkerPhase(str, Enum):
    """Lifecycle phase of a worker, also used to filter event listings."""

    ABORTED = "ABORTED"
    CANCELED = "CANCELED"
    FAILED = "FAILED"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SCHEDULING_FAILED = "SCHEDULING_FAILED"
    STARTING = "STARTING"
    SUCCEEDED = "SUCCEEDED"
    TIMED_OUT = "TIMED_OUT"
    UNKNOWN = "UNKNOWN"


def phases_query_param(phases: Iterable[WorkerPhase]) -> str:
    """Encode worker phases as the comma-separated ``workerPhases`` value.

    Args:
        phases: Phases to filter on, in the order they should be sent.

    Returns:
        The phases joined with commas, e.g. ``"RUNNING,PENDING"``.
    """
    return ",".join(WorkerPhase(phase).value for phase in phases)


class GitConfig(WireModel):
    """Where a worker should check its source out from."""

    clone_url: str | None = Field(default=None, alias="cloneURL")
    commit: str | None = None
    ref: str | None = None
    init_submodules: bool | None = None


class KubernetesConfig(WireModel):
    image_pull_secrets: list[str] | None = None


class JobPolicies(WireModel):
    """Privileges a worker may grant to the jobs it spawns."""

    allow_privileged: bool | None = None
    allow_docker_socket_mount: bool | None = None


class WorkerSpec(WireModel):
    """Template describing how workers are run for a project."""

    container: ContainerSpec | None = None
    use_workspace: bool | None = None
    workspace_size: str | None = None
    git: GitConfig | None = None
    kubernetes: KubernetesConfig | None = None
    job_policies: JobPolicies | None = None
    log_level: LogLevel | None = None
    config_files_directory: str | None = None
    default_config_files: dict[str, str] | None = None

    @classmethod
    def from_script(
        cls,
        script: str,
        filename: str = DEFAULT_SCRIPT_NAME,
    ) -> "WorkerSpec":
        """Create a worker spec running the given script as its only config file."""
        return cls(default_config_files={filename: script})


class WorkerStatus(WireModel):
    started: datetime | None = None
    ended: datetime | None = None
    phase: WorkerPhase | None = None


class Worker(WireModel):
    """The worker handling an event, with the jobs it has spawned so far."""

    spec: WorkerSpec
    status: WorkerStatus | None = None
    jobs: list[Job] | None = None
