import hashlib
import json

import pytest

from ocitarball.config import ImageConfiguration, OciConfig, WasmConfig


def test_image_configuration_layers_are_diff_ids():
    conf = ImageConfiguration(diff_ids=["sha256:aa", "sha256:bb"])
    assert conf.layers() == ["sha256:aa", "sha256:bb"]


def test_image_configuration_layers_is_a_copy():
    conf = ImageConfiguration(diff_ids=["sha256:aa"])
    conf.layers().append("sha256:zz")
    assert conf.diff_ids == ["sha256:aa"]


def test_image_configuration_json_contents():
    conf = ImageConfiguration(
        os="wasip1",
        architecture="wasm",
        entrypoint=["/app.wasm"],
        labels={"containerd.runwasi.layers": "abc"},
    )
    doc = json.loads(conf.to_json())
    assert doc["os"] == "wasip1"
    assert doc["architecture"] == "wasm"
    assert doc["config"]["Entrypoint"] == ["/app.wasm"]
    assert doc["config"]["Labels"] == {"containerd.runwasi.layers": "abc"}
    assert doc["rootfs"] == {"type": "layers", "diff_ids": []}


def test_image_configuration_omits_empty_fields():
    doc = json.loads(ImageConfiguration().to_json())
    assert "config" not in doc
    assert "created" not in doc
    assert "author" not in doc


def test_image_configuration_json_is_pretty():
    text = ImageConfiguration(entrypoint=["/a.wasm"]).to_json()
    assert "\n" in text
    assert text.splitlines()[1].startswith("  ")


def test_wasm_config_from_module(tmp_path):
    module = tmp_path / "app.wasm"
    module.write_bytes(b"\x00asm\x01\x00\x00\x00")
    conf = WasmConfig.from_module(module)
    expected = "sha256:" + hashlib.sha256(module.read_bytes()).hexdigest()
    assert conf.layers() == [expected]
    assert conf.architecture == "wasm"
    assert conf.os == "wasip1"


def test_wasm_config_json_round_trip(tmp_path):
    conf = WasmConfig(layer_digests=["sha256:aa"], created="2024-01-01T00:00:00Z")
    doc = json.loads(conf.to_json())
    assert doc["layerDigests"] == ["sha256:aa"]
    assert doc["created"] == "2024-01-01T00:00:00Z"
    assert doc["architecture"] == "wasm"
    assert "component" not in doc


def test_wasm_config_from_missing_module(tmp_path):
    with pytest.raises(OSError):
        WasmConfig.from_module(tmp_path / "missing.wasm")


def test_oci_config_is_abstract():
    with pytest.raises(TypeError):
        OciConfig()