import sys

import pytest
from fastapi.testclient import TestClient

from conftest import make_settings, wait_for
from webar.main import create_app


def _model_file(content: bytes, name: str = "warrior.glb"):
    return ("model", (name, content, "model/gltf-binary"))


def _stored_files(settings):
    if not settings.upload_root.exists():
        return []
    return sorted(path.name for path in settings.upload_root.iterdir() if path.is_file())


def test_upload_creates_record_and_viewer_link(client, settings, model_bytes):
    response = client.post("/upload", files=[_model_file(model_bytes)], data={"caption": "Chiến thắng"})

    assert response.status_code == 200
    payload = response.json()
    asset_id = payload["id"]
    assert len(asset_id) == 8
    assert payload["url"].endswith(f"/view/{asset_id}")

    detail = client.get(f"/api/asset/{asset_id}").json()
    assert detail["model"] == f"/uploads/{asset_id}-model.glb"
    assert detail["caption"] == "Chiến thắng"
    assert detail["modelSize"] == len(model_bytes)
    assert detail["optimized"] is False
    assert (settings.upload_root / f"{asset_id}-model.glb").read_bytes() == model_bytes

    served = client.get(detail["model"])
    assert served.status_code == 200
    assert served.content == model_bytes


def test_defaults_apply_to_missing_and_invalid_fields(client, model_bytes):
    response = client.post(
        "/upload",
        files=[_model_file(model_bytes)],
        data={"modelY": "high", "statStrength": "0", "animations": "{broken"},
    )
    detail = client.get(f"/api/asset/{response.json()['id']}").json()

    assert detail["modelY"] == 0
    assert detail["caption"] is None
    assert detail["characterName"] == "Vị Tướng"
    assert detail["characterHeight"] == 170
    assert detail["characterStats"] == {"strength": 0, "strategy": 80, "leadership": 80, "defense": 80}
    assert detail["animations"] == []
    assert detail["effects"] == []
    assert detail["audio"] is None
    assert detail["props"] == []


def test_companion_files_and_props_keep_order(client, settings, model_bytes):
    files = [
        _model_file(model_bytes),
        ("audio", ("theme.mp3", b"ID3-audio", "audio/mpeg")),
        ("groundImage", ("ground.PNG", b"png-bytes", "image/png")),
        ("props", ("sword.glb", b"sword", "model/gltf-binary")),
        ("props", ("shield.glb", b"shield", "model/gltf-binary")),
    ]
    response = client.post("/upload", files=files, data={"effects": '["smoke"]'})
    asset_id = response.json()["id"]
    detail = client.get(f"/api/asset/{asset_id}").json()

    assert detail["audio"] == f"/uploads/{asset_id}-audio.mp3"
    assert detail["groundImage"] == f"/uploads/{asset_id}-groundImage.png"
    assert detail["envImage"] is None
    assert detail["props"] == [
        f"/uploads/{asset_id}-props-0.glb",
        f"/uploads/{asset_id}-props-1.glb",
    ]
    assert detail["effects"] == ["smoke"]
    assert (settings.upload_root / f"{asset_id}-props-1.glb").read_bytes() == b"shield"
    assert client.get(detail["audio"]).content == b"ID3-audio"


def test_missing_model_is_rejected_without_writing(client, settings):
    response = client.post(
        "/upload",
        files=[("audio", ("theme.mp3", b"ID3-audio", "audio/mpeg"))],
        data={"caption": "no model"},
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert _stored_files(settings) == []
    assert client.get("/api/assets").json() == []


def test_empty_model_is_rejected(client, settings):
    response = client.post("/upload", files=[_model_file(b"")])

    assert response.status_code == 400
    assert _stored_files(settings) == []


def test_oversized_file_is_rejected_and_cleaned_up(client, settings, model_bytes):
    files = [
        _model_file(model_bytes),
        ("audio", ("long.mp3", b"x" * (64 * 1024 + 1), "audio/mpeg")),
    ]
    response = client.post("/upload", files=files)

    assert response.status_code == 413
    assert "error" in response.json()
    assert _stored_files(settings) == []
    assert client.get("/api/assets").json() == []


def test_too_many_props_is_rejected(client, settings, model_bytes):
    files = [_model_file(model_bytes)] + [
        ("props", (f"prop{index}.glb", b"prop", "model/gltf-binary")) for index in range(4)
    ]
    response = client.post("/upload", files=files)

    assert response.status_code == 400
    assert _stored_files(settings) == []


def test_repeated_uploads_get_distinct_ids(client, model_bytes):
    ids = {client.post("/upload", files=[_model_file(model_bytes)]).json()["id"] for _ in range(5)}

    assert len(ids) == 5
    listed = client.get("/api/assets").json()
    assert {item["id"] for item in listed} == ids
    assert set(listed[0]) == {"id", "characterName", "characterEra", "characterHeight", "createdAt"}


def test_records_survive_restart(tmp_path, model_bytes):
    settings = make_settings(tmp_path)
    with TestClient(create_app(settings)) as first:
        asset_id = first.post("/upload", files=[_model_file(model_bytes)]).json()["id"]

    with TestClient(create_app(make_settings(tmp_path))) as second:
        response = second.get(f"/api/asset/{asset_id}")
        assert response.status_code == 200
        assert response.json()["id"] == asset_id


def test_unknown_asset_is_not_found(client):
    response = client.get("/api/asset/nope0000")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_store_failure_removes_written_files(app, client, settings, model_bytes, monkeypatch):
    from webar.modules.assets import AssetStoreError

    def broken_put(record):
        raise AssetStoreError("disk full")

    monkeypatch.setattr(app.state.container.store, "put", broken_put)
    response = client.post("/upload", files=[_model_file(model_bytes)])

    assert response.status_code == 500
    assert response.json() == {"error": "Upload failed"}
    assert _stored_files(settings) == []


def test_unreadable_store_is_server_error(client, settings):
    settings.data_file.write_text("{broken", encoding="utf-8")
    client.app.state.container.store.reload()

    for url in ("/api/assets", "/api/asset/abc12345"):
        response = client.get(url)
        assert response.status_code == 500
        assert response.json() == {"error": "Asset store unavailable"}


COPY_SCRIPT = "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2]); open(sys.argv[2], 'ab').write(b'-optimized')"


@pytest.fixture
def optimizing_settings(tmp_path):
    return make_settings(
        tmp_path,
        optimizer={
            "enabled": True,
            "command": [sys.executable, "-c", COPY_SCRIPT, "{input}", "{output}"],
            "timeout": 30,
        },
    )


def test_upload_is_served_optimized_once_job_finishes(optimizing_settings, model_bytes):
    settings = optimizing_settings
    with TestClient(create_app(settings)) as client:
        asset_id = client.post("/upload", files=[_model_file(model_bytes)]).json()["id"]
        optimized = settings.optimized_root / f"{asset_id}-model.glb"

        assert wait_for(optimized.exists)
        expected = model_bytes + b"-optimized"
        assert wait_for(lambda: optimized.stat().st_size == len(expected))

        response = client.get(f"/uploads/{asset_id}-model.glb")
        assert response.headers["x-optimized"] == "true"
        assert response.content == expected

        detail = client.get(f"/api/asset/{asset_id}").json()
        assert detail["optimized"] is True
        assert detail["modelSize"] == len(expected)
        assert (settings.upload_root / f"{asset_id}-model.glb").read_bytes() == model_bytes
