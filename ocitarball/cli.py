"""Command line tool that packs Wasm modules into an OCI image tarball."""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Sequence

from .builder import WASM_LAYER_MEDIA_TYPE, BuildError, Builder, MediaType
from .config import (
    WASM_ARTIFACT_LAYER_MEDIA_TYPE,
    WASM_MANIFEST_CONFIG_MEDIA_TYPE,
    ImageConfiguration,
    WasmConfig,
)

_LAYERS_LABEL = "containerd.runwasi.layers"


def _file_digest(path: Path) -> str:
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(1 << 16), b""):
                digest.update(chunk)
    except OSError as exc:
        raise BuildError(f"failed to calculate digest for module {path}") from exc
    return digest.hexdigest()


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    """Parse the command line options."""
    parser = argparse.ArgumentParser(
        prog="oci-tar-builder",
        description="Build an OCI image tarball from Wasm modules or components.",
    )
    parser.add_argument("-o", "--out-path", dest="out_path", default=None)
    parser.add_argument("-n", "--name", required=True)
    parser.add_argument("-t", "--tag", required=True)
    parser.add_argument("-r", "--repo", required=True)
    parser.add_argument("-m", "--module", action="append", default=[])
    parser.add_argument("-l", "--layer", action="append", default=[])
    parser.add_argument("-c", "--components", default=None)
    parser.add_argument("-a", "--as-artifact", dest="as_artifact", action="store_true")
    return parser.parse_args(argv)


def _write_tarball(builder: Builder, out_path: Path, cleanup_message: str) -> None:
    print(f"Creating oci tar file {out_path}")
    failure: BuildError | None = None
    with open(out_path, "wb") as handle:
        try:
            builder.build(handle)
        except BuildError as exc:
            failure = exc
    if failure is None:
        print(f"Successfully created oci tar file {out_path}")
        return
    print(f"Building oci tar file {out_path} failed: {failure!r}")
    try:
        out_path.unlink()
    except OSError:
        print(cleanup_message)


def generate_wasm_artifact(args: argparse.Namespace, out_path: Path) -> None:
    """Write a Wasm OCI artifact holding one module or component."""
    print("Generating wasm artifact")
    out_path = Path(out_path)

    if args.components is not None:
        components_dir = Path(args.components)
        entries = sorted(components_dir.iterdir())
        if len(entries) != 1:
            print(f"Currently only supports a single component file {str(components_dir)!r}")
        if not entries:
            raise BuildError(f"no component file found in {components_dir}")
        layer_path = entries[0]
    else:
        layer_path = Path(args.module[0])

    config = WasmConfig.from_module(layer_path)

    builder = Builder()
    builder.add_config(
        config,
        f"{args.repo}/{args.name}:{args.tag}",
        WASM_MANIFEST_CONFIG_MEDIA_TYPE,
    )
    builder.add_layer_with_media_type(layer_path, WASM_ARTIFACT_LAYER_MEDIA_TYPE)

    _write_tarball(builder, out_path, "Failed to clean up oci tar file on error")


def generate_wasi_image(args: argparse.Namespace, out_path: Path) -> None:
    """Write an OCI image whose layers are the given Wasm modules and files."""
    print("Generating wasm oci image")
    out_path = Path(out_path)
    entry_point = f"{args.name}.wasm"

    builder = Builder()
    layer_digests: list[str] = []

    for module in args.module:
        module_path = Path(module)
        builder.add_layer_with_media_type(module_path, WASM_LAYER_MEDIA_TYPE)
        layer_digests.append(_file_digest(module_path))

    for layer_config in args.layer:
        options = layer_config.split("=")
        layer_type, layer_path = options[0], Path(options[-1])
        builder.add_layer_with_media_type(layer_path, layer_type)
        layer_digests.append(_file_digest(layer_path))

    if args.components is not None:
        for path in sorted(Path(args.components).iterdir()):
            if path.suffix == ".wasm":
                builder.add_layer_with_media_type(path, WASM_LAYER_MEDIA_TYPE)
                layer_digests.append(_file_digest(path))
            else:
                extension = path.suffix.lstrip(".")
                print(f"Skipping Unknown file type: {str(path)!r} with extension {extension!r}")

    # Each configuration has to be unique, since the rootfs lists no layers.
    unique_id = hashlib.sha256("".join(layer_digests).encode()).hexdigest()

    config = ImageConfiguration(
        architecture="wasm",
        os="wasip1",
        entrypoint=[entry_point],
        labels={_LAYERS_LABEL: unique_id},
        diff_ids=[],
    )
    builder.add_config(config, f"{args.repo}/{args.name}:{args.tag}", MediaType.IMAGE_CONFIG)

    _write_tarball(builder, out_path, "Failed to remove temporary file")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tool; returns the process exit status."""
    args = parse_args(argv)

    if args.out_path:
        out_path = Path(args.out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        out_path = Path.cwd()

    if args.module and args.components is not None:
        print("Mutually exclusive flags: module and components")
        return 0

    if not args.module and args.components is None:
        print("Must supply module or components")
        return 0

    try:
        if args.as_artifact:
            generate_wasm_artifact(args, out_path)
        else:
            generate_wasi_image(args, out_path)
    except (BuildError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())