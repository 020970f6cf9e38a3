"""Container specifications shared by worker and job payloads."""

from enum import Enum

from .meta import WireModel


class ImagePullPolicy(str, Enum):
    """When the container runtime should pull the image."""

    IF_NOT_PRESENT = "IfNotPresent"
    ALWAYS = "Always"


class ContainerSpec(WireModel):
    """Image, entrypoint and environment for a single container."""

    image: str
    image_pull_policy: ImagePullPolicy | None = None
    command: list[str] | None = None
    arguments: list[str] | None = None
    environment: dict[str, str] | None = None
