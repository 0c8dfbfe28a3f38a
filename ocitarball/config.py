"""Image configurations that can be packed into an OCI image tarball."""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from os import PathLike
from pathlib import Path
from typing import Any

WASM_ARCHITECTURE = "wasm"
WASM_OS = "wasip1"
WASM_ARTIFACT_LAYER_MEDIA_TYPE = "application/wasm"
WASM_MANIFEST_CONFIG_MEDIA_TYPE = "application/vnd.wasm.config.v0+json"


def _sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


class OciConfig(ABC):
    """A configuration blob that describes an image.

    Implementations expose ``os`` and ``architecture`` attributes used for the
    platform entry of the image index.
    """

    os: str
    architecture: str

    @abstractmethod
    def layers(self) -> list[str]:
        """Digests of the layers the configuration refers to."""

    @abstractmethod
    def to_json(self) -> str:
        """The configuration serialised as pretty-printed JSON."""


@dataclass
class ImageConfiguration(OciConfig):
    """An OCI image configuration (``application/vnd.oci.image.config.v1+json``)."""

    architecture: str = "amd64"
    os: str = "linux"
    entrypoint: list[str] | None = None
    cmd: list[str] | None = None
    env: list[str] | None = None
    working_dir: str | None = None
    labels: dict[str, str] | None = None
    diff_ids: list[str] = field(default_factory=list)
    created: str | None = None
    author: str | None = None

    def layers(self) -> list[str]:
        return list(self.diff_ids)

    def _config_section(self) -> dict[str, Any] | None:
        section = {
            "Env": self.env,
            "Entrypoint": self.entrypoint,
            "Cmd": self.cmd,
            "WorkingDir": self.working_dir,
            "Labels": self.labels,
        }
        present = {key: value for key, value in section.items() if value is not None}
        return present or None

    def to_json(self) -> str:
        document: dict[str, Any] = {}
        if self.created is not None:
            document["created"] = self.created
        if self.author is not None:
            document["author"] = self.author
        document["architecture"] = self.architecture
        document["os"] = self.os
        config = self._config_section()
        if config is not None:
            document["config"] = config
        document["rootfs"] = {"type": "layers", "diff_ids": list(self.diff_ids)}
        return json.dumps(document, indent=2)


@dataclass
class WasmConfig(OciConfig):
    """Configuration of a Wasm OCI artifact (``application/vnd.wasm.config.v0+json``)."""

    layer_digests: list[str] = field(default_factory=list)
    created: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    )
    os: str = WASM_OS
    author: str | None = None
    component: dict[str, Any] | None = None
    architecture: str = field(default=WASM_ARCHITECTURE, init=False)

    def layers(self) -> list[str]:
        return list(self.layer_digests)

    def to_json(self) -> str:
        document: dict[str, Any] = {"created": self.created}
        if self.author is not None:
            document["author"] = self.author
        document["architecture"] = self.architecture
        document["os"] = self.os
        document["layerDigests"] = list(self.layer_digests)
        if self.component is not None:
            document["component"] = self.component
        return json.dumps(document, indent=2)

    @classmethod
    def from_module(cls, path: str | PathLike[str]) -> WasmConfig:
        """Describe a single Wasm module file as an artifact configuration."""
        digest = _sha256_file(Path(path))
        return cls(layer_digests=[f"sha256:{digest}"])