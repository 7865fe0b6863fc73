"""Tests for the video upload endpoint."""
from pathlib import Path

from fastapi.testclient import TestClient

from adwall.main import create_app


def video(name="clip.mp4", payload=b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4"):
    return ("videos", (name, payload, content_type))


def stored_files(settings):
    directory = Path(settings.upload.directory)
    return sorted(p.name for p in directory.iterdir()) if directory.exists() else []


def test_upload_and_serve(client, settings):
    payload = b"fake video bytes"
    response = client.post("/api/upload", files=[video(payload=payload)])

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    [descriptor] = body["data"]
    assert descriptor["original_name"] == "clip.mp4"
    assert descriptor["content_type"] == "video/mp4"
    assert descriptor["size"] == len(payload)
    assert descriptor["filename"].endswith(".mp4")
    assert descriptor["url"] == f"/uploads/{descriptor['filename']}"

    served = client.get(descriptor["url"])
    assert served.status_code == 200
    assert served.content == payload


def test_several_files(client, settings):
    response = client.post(
        "/api/upload",
        files=[video("a.mp4"), video("b.webm", content_type="video/webm")],
    )

    assert response.status_code == 201
    assert [f["original_name"] for f in response.json()["data"]] == ["a.mp4", "b.webm"]
    assert len(stored_files(settings)) == 2


def test_client_path_is_not_used(client, settings):
    response = client.post("/api/upload", files=[video("../../etc/evil.mp4")])

    filename = response.json()["data"][0]["filename"]
    assert "/" not in filename
    assert stored_files(settings) == [filename]


def test_rejects_non_video(client, settings):
    response = client.post("/api/upload", files=[video("notes.txt", b"hi", "text/plain")])

    assert response.status_code == 400
    assert response.json()["message"] == "Only video files are allowed"
    assert stored_files(settings) == []


def test_rejects_too_many_files(make_settings):
    settings = make_settings(ADWALL_UPLOAD_MAX_FILES=2)

    with TestClient(create_app(settings)) as client:
        response = client.post("/api/upload", files=[video(f"{i}.mp4") for i in range(3)])

    assert response.status_code == 400
    assert "at most 2" in response.json()["message"]
    assert stored_files(settings) == []


def test_rejects_oversized_file_and_cleans_up(make_settings):
    settings = make_settings(ADWALL_UPLOAD_MAX_BYTES=10)

    with TestClient(create_app(settings)) as client:
        response = client.post(
            "/api/upload",
            files=[video("small.mp4", b"12345"), video("big.mp4", b"x" * 11)],
        )

    assert response.status_code == 413
    assert response.json()["success"] is False
    assert stored_files(settings) == []


def test_no_files(client):
    response = client.post("/api/upload", data={"note": "nothing attached"})

    assert response.status_code == 400
    assert response.json()["message"] == "No files uploaded"
