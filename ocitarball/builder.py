"""Assemble OCI image layouts into a tar archive."""

from __future__ import annotations

import hashlib
import io
import json
import logging
import tarfile
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Any, BinaryIO

from .config import OciConfig

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
WASM_LAYER_MEDIA_TYPE = "application/vnd.bytecodealliance.wasm.component.layer.v0+wasm"
_BLOB_DIR = "blobs/sha256/"


class MediaType(str, Enum):
    """Well-known OCI media types."""

    IMAGE_CONFIG = "application/vnd.oci.image.config.v1+json"
    IMAGE_LAYER = "application/vnd.oci.image.layer.v1.tar"
    IMAGE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
    IMAGE_INDEX = "application/vnd.oci.image.index.v1+json"


class BuildError(Exception):
    """Raised when an image tarball cannot be produced."""


def _media_type_str(media_type: MediaType | str) -> str:
    return media_type.value if isinstance(media_type, MediaType) else str(media_type)


def _sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _compact(document: Any) -> str:
    return json.dumps(document, separators=(",", ":"))


def _header(name: str, size: int, mode: int) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name)
    info.size = size
    info.mode = mode
    return info


def _add_bytes(archive: tarfile.TarFile, name: str, data: bytes, mode: int) -> None:
    archive.addfile(_header(name, len(data), mode), io.BytesIO(data))


class Builder:
    """Collects a configuration and layers and writes them as an OCI tarball."""

    def __init__(self) -> None:
        self.configs: list[tuple[OciConfig, str, str]] = []
        self.layers: list[tuple[Path, str]] = []

    def add_config(self, config: OciConfig, name: str, media_type: MediaType | str) -> Builder:
        self.configs.append((config, name, _media_type_str(media_type)))
        return self

    def add_layer(self, layer: str | PathLike[str]) -> Builder:
        self.layers.append((Path(layer), ""))
        return self

    def add_layer_with_media_type(
        self, layer: str | PathLike[str], media_type: MediaType | str
    ) -> Builder:
        self.layers.append((Path(layer), _media_type_str(media_type)))
        return self

    def build(self, w: BinaryIO) -> None:
        """Write the image layout as a tar archive to the binary stream ``w``."""
        if len(self.configs) > 1:
            raise BuildError("only one config is supported")

        docker_manifest: dict[str, Any] = {"Config": "", "RepoTags": [], "Layers": []}
        layer_descriptors: dict[str, dict[str, Any]] = {}
        manifests: list[dict[str, Any]] = []

        with tarfile.open(fileobj=w, mode="w", format=tarfile.GNU_FORMAT) as archive:
            for path, media_type in self.layers:
                try:
                    digest = _sha256_file(path)
                    size = path.stat().st_size
                except OSError as exc:
                    raise BuildError(f"failed to digest layer {path}") from exc
                oci_digest = f"sha256:{digest}"
                layer_descriptors[oci_digest] = {
                    "mediaType": media_type or MediaType.IMAGE_LAYER.value,
                    "digest": oci_digest,
                    "size": size,
                }
                blob_path = _BLOB_DIR + digest
                try:
                    with path.open("rb") as handle:
                        archive.addfile(_header(blob_path, size, 0o444), handle)
                except OSError as exc:
                    raise BuildError(f"could not open layer {path}") from exc
                docker_manifest["Layers"].append(blob_path)

            for config, name, config_media_type in self.configs:
                config_bytes = config.to_json().encode()
                config_digest = hashlib.sha256(config_bytes).hexdigest()
                config_path = _BLOB_DIR + config_digest
                _add_bytes(archive, config_path, config_bytes, 0o444)
                docker_manifest["Config"] = config_path

                for layer_id in config.layers():
                    logger.debug("id: %s", layer_id)
                    if layer_id not in layer_descriptors:
                        logger.warning("rootfs diff with id %s not found in layers", layer_id)

                annotations: dict[str, str] = {}
                if ":" in name:
                    annotations["org.opencontainers.image.ref.name"] = name.split(":")[1]
                docker_manifest["RepoTags"].append(name)
                annotations["io.containerd.image.name"] = name

                manifest = {
                    "schemaVersion": SCHEMA_VERSION,
                    "mediaType": MediaType.IMAGE_MANIFEST.value,
                    "config": {
                        "mediaType": config_media_type,
                        "digest": f"sha256:{config_digest}",
                        "size": len(config_bytes),
                    },
                    "layers": list(layer_descriptors.values()),
                    "annotations": dict(annotations),
                }
                manifest_bytes = _compact(manifest).encode()
                manifest_digest = hashlib.sha256(manifest_bytes).hexdigest()
                _add_bytes(archive, _BLOB_DIR + manifest_digest, manifest_bytes, 0o444)

                manifests.append(
                    {
                        "mediaType": MediaType.IMAGE_MANIFEST.value,
                        "digest": f"sha256:{manifest_digest}",
                        "size": len(manifest_bytes),
                        "annotations": annotations,
                        "platform": {
                            "architecture": config.architecture,
                            "os": config.os,
                        },
                    }
                )

            index = {
                "schemaVersion": SCHEMA_VERSION,
                "mediaType": MediaType.IMAGE_INDEX.value,
                "manifests": manifests,
            }
            _add_bytes(archive, "index.json", _compact(index).encode(), 0o644)
            _add_bytes(
                archive,
                "oci-layout",
                _compact({"imageLayoutVersion": "1.0.0"}).encode(),
                0o644,
            )
            _add_bytes(archive, "manifest.json", _compact([docker_manifest]).encode(), 0o644)