"""Job payloads.

A job is a unit of work spawned by a worker while it handles an event. Jobs
are only ever read through their parent worker; the client never creates
them directly.
"""

from datetime import datetime
from enum import Enum

from .container import ContainerSpec
from .meta import WireModel


class JobPhase(str, Enum):
    """Lifecycle phase of a job."""

    ABORTED = "ABORTED"
    FAILED = "FAILED"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SCHEDULING_FAILED = "SCHEDULING_FAILED"
    STARTING = "STARTING"
    SUCCEEDED = "SUCCEEDED"
    TIMED_OUT = "TIMED_OUT"
    UNKNOWN = "UNKNOWN"


class JobStatus(WireModel):
    started: datetime | None = None
    ended: datetime | None = None
    phase: JobPhase | None = None


class JobHost(WireModel):
    """Constraints on the node a job may be scheduled to."""

    os: str | None = None
    node_selector: dict[str, str] | None = None


class JobContainerSpec(ContainerSpec):
    """A container spec extended with job-only mount and privilege settings.

    The base container fields sit at the same level of the JSON object as
    the job-specific ones.
    """

    working_directory: str | None = None
    workspace_mount_path: str | None = None
    source_mount_path: str | None = None
    privileged: bool | None = None
    use_host_docker_socket: bool | None = None


class JobSpec(WireModel):
    primary_container: JobContainerSpec
    sidecar_containers: dict[str, JobContainerSpec] | None = None
    timeout_seconds: int | None = None
    host: JobHost | None = None


class Job(WireModel):
    """A job belonging to a worker."""

    name: str | None = None
    spec: JobSpec
    status: JobStatus | None = None
