"""Package the demo Wasm application into an OCI image tarball."""

from __future__ import annotations

import hashlib
import tarfile
from os import PathLike
from pathlib import Path

from .builder import Builder, MediaType
from .config import ImageConfiguration

DEMO_APP_NAME = "wasi-demo-app.wasm"
DEMO_IMAGE_NAME = "localhost/wasi-demo-app:latest"


def _file_digest(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def build_demo_image(app_path: str | PathLike[str], out_dir: str | PathLike[str]) -> Path:
    """Write ``img.tar`` for the demo app into ``out_dir`` and return its path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    layer_path = out_dir / "layer.tar"
    with tarfile.open(layer_path, "w", format=tarfile.GNU_FORMAT) as layer:
        layer.add(Path(app_path), arcname=DEMO_APP_NAME)

    builder = Builder()
    builder.add_layer(layer_path)

    config = ImageConfiguration(
        architecture="wasm",
        os="wasip1",
        entrypoint=[f"/{DEMO_APP_NAME}"],
        diff_ids=[f"sha256:{_file_digest(layer_path)}"],
    )
    builder.add_config(config, DEMO_IMAGE_NAME, MediaType.IMAGE_CONFIG)

    image_path = out_dir / "img.tar"
    with image_path.open("wb") as handle:
        builder.build(handle)
    return image_path