import io
import json
import tarfile

import pytest

from ocitarball.builder import MediaType
from ocitarball.demo_image import build_demo_image


def _read(archive_path, name):
    with tarfile.open(archive_path) as archive:
        return archive.extractfile(name).read()


@pytest.fixture
def app_file(tmp_path):
    path = tmp_path / "app.wasm"
    path.write_bytes(b"\0asm\x01\0\0\0demo")
    return path


def _manifest_and_config(image):
    index = json.loads(_read(image, "index.json"))
    manifest_digest = index["manifests"][0]["digest"].split(":")[1]
    manifest = json.loads(_read(image, "blobs/sha256/" + manifest_digest))
    config_digest = manifest["config"]["digest"].split(":")[1]
    config = json.loads(_read(image, "blobs/sha256/" + config_digest))
    return index, manifest, config


def test_image_is_written_into_out_dir(tmp_path, app_file):
    out_dir = tmp_path / "out"
    image = build_demo_image(app_file, out_dir)
    assert image == out_dir / "img.tar"
    assert image.is_file()


def test_config_entrypoint_and_platform(tmp_path, app_file):
    image = build_demo_image(app_file, tmp_path / "out")
    index, manifest, config = _manifest_and_config(image)
    assert config["config"]["Entrypoint"] == ["/wasi-demo-app.wasm"]
    assert config["os"] == "wasip1"
    assert config["architecture"] == "wasm"
    assert index["manifests"][0]["platform"] == {"architecture": "wasm", "os": "wasip1"}
    assert manifest["config"]["mediaType"] == MediaType.IMAGE_CONFIG.value


def test_diff_id_matches_layer(tmp_path, app_file):
    image = build_demo_image(app_file, tmp_path / "out")
    _, manifest, config = _manifest_and_config(image)
    assert len(manifest["layers"]) == 1
    layer = manifest["layers"][0]
    assert layer["mediaType"] == MediaType.IMAGE_LAYER.value
    assert config["rootfs"]["diff_ids"] == [layer["digest"]]


def test_layer_holds_app(tmp_path, app_file):
    image = build_demo_image(app_file, tmp_path / "out")
    _, manifest, _ = _manifest_and_config(image)
    blob = _read(image, "blobs/sha256/" + manifest["layers"][0]["digest"].split(":")[1])
    with tarfile.open(fileobj=io.BytesIO(blob)) as layer:
        assert layer.getnames() == ["wasi-demo-app.wasm"]
        assert layer.extractfile("wasi-demo-app.wasm").read() == app_file.read_bytes()


def test_missing_app_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_demo_image(tmp_path / "missing.wasm", tmp_path / "out")