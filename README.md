# ocitarball

Build OCI image layout tarballs that hold WebAssembly modules or components,
ready to be imported into a container runtime such as containerd.

Each tarball carries the blobs, an `index.json`, an `oci-layout` file and a
Docker-style `manifest.json`, so it can be loaded by tools that expect either
format.

## Installation

```
pip install .
```

## Command line

Package one or more Wasm modules as a regular image:

```
oci-tar-builder --name wasi-demo-oci --repo ghcr.io/example/images --tag latest \
    --module ./app.wasm -o ./img-oci.tar
```

Each module becomes a layer with the media type
`application/vnd.bytecodealliance.wasm.component.layer.v0+wasm`, and the
image entry point is `<name>.wasm`. The image config carries a
`containerd.runwasi.layers` label derived from the layer digests, so that
images with different layers get different configs.

Other options:

- `--layer <media-type>=<path>` adds a file as a layer with the given media type.
- `--components <dir>` adds every `.wasm` file in the directory as a layer;
  other files are skipped with a message.
- `--module` may be repeated. `--module` and `--components` are mutually
  exclusive, and one of them is required.
- `-o`, `--out-path` sets the output file; missing parent directories are created.

Package a single module (or the single file in a component directory) as a
Wasm OCI artifact:

```
oci-tar-builder --name wasi-demo-oci-artifact --as-artifact \
    --repo ghcr.io/example/images --tag latest --module ./app.wasm -o ./img-oci-artifact.tar
```

The artifact uses the config media type `application/vnd.wasm.config.v0+json`
and the layer media type `application/wasm`.

The image is tagged `<repo>/<name>:<tag>`. The command exits with status 1
when a file cannot be read or the tarball cannot be written.

## Library

```python
from ocitarball.builder import Builder, MediaType
from ocitarball.config import ImageConfiguration

config = ImageConfiguration(
    architecture="wasm",
    os="wasip1",
    entrypoint=["/app.wasm"],
)

builder = Builder()
builder.add_layer("layer.tar")
builder.add_config(config, "ghcr.io/example/app:latest", MediaType.IMAGE_CONFIG)
with open("img.tar", "wb") as out:
    builder.build(out)
```

- `Builder.add_layer(path)` adds a layer with the standard OCI layer media
  type; `Builder.add_layer_with_media_type(path, media_type)` sets it
  explicitly. Layers keep the order in which they were added.
- A builder accepts at most one config; `build` raises `BuildError` otherwise,
  and also when a layer file cannot be read.
- `ImageConfiguration` and `WasmConfig` are the two `OciConfig` kinds.
  `WasmConfig.from_module(path)` produces the config for a Wasm artifact whose
  single layer is that file.
- A name containing `:` gets an `org.opencontainers.image.ref.name`
  annotation with the part after it; every manifest is annotated with
  `io.containerd.image.name`.

`ocitarball.demo_image.build_demo_image(app_path, out_dir)` packages a single
Wasm application into `out_dir/img.tar`, named
`localhost/wasi-demo-app:latest`, with `/wasi-demo-app.wasm` as its entry
point, and returns the path of the tarball.

## Demo application

A small test program is included:

```
wasi-demo-app echo hello world
wasi-demo-app sleep 1.5
wasi-demo-app exit 3
wasi-demo-app write out.txt some text
wasi-demo-app
```

With no command it runs as a daemon, printing a verse every second. An unknown
command prints an error and exits with status 1.

## What this package does not do

It only writes tarballs. It does not load them into a container runtime, run
Wasm workloads, or compile the demo application to WebAssembly; the demo
program here is a plain Python command. Artifacts built from a component
directory do not record component metadata in their config.