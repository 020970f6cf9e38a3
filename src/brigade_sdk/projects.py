"""Project payloads and the projects client."""

from .events import EventSubscription
from .meta import Kind, ObjectMeta, TypedModel, WireModel
from .restapi import ResourceClient, TransportClient
from .worker import WorkerSpec


class ProjectSpec(WireModel):
    """Which events a project subscribes to and how its workers are run."""

    event_subscriptions: list[EventSubscription] | None = None
    worker_template: WorkerSpec


class KubernetesDetails(WireModel):
    """Cluster details filled in by the server. Never sent by clients."""

    namespace: str | None = None


class Project(TypedModel):
    metadata: ObjectMeta
    description: str | None = None
    spec: ProjectSpec
    kubernetes: KubernetesDetails | None = None

    @classmethod
    def from_script(cls, project_id: str, description: str, script: str) -> "Project":
        """Create a project whose workers run the given script."""
        return cls(
            metadata=ObjectMeta(id=project_id),
            description=description,
            spec=ProjectSpec(worker_template=WorkerSpec.from_script(script)),
        )


class ProjectsClient(ResourceClient[Project]):
    """Client for the ``projects`` collection."""

    def __init__(self, transport: TransportClient):
        super().__init__(transport, "projects", Project, Kind.PROJECT)

    def prepare(self, obj: Project) -> Project:
        """Stamp the type tag and drop fields only the server may set.

        The server rejects projects that carry a creation timestamp or
        Kubernetes details.
        """
        project = super().prepare(obj)
        return project.model_copy(
            update={
                "metadata": project.metadata.model_copy(update={"created": None}),
                "kubernetes": None,
            },
        )

    async def update_project(self, project: Project) -> Project:
        """Update a project in place of the one sharing its metadata id."""
        return await self.update(project.metadata.id, project)
