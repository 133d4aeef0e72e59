"""Tests for the JSON API."""
import io
import os
from unittest.mock import patch
from PIL import Image as PILImage
from app.models.asset import Asset
from app.models.generation import Generation
from app.services import generation_service

VALID = """export default function SimpleButton() {
  return <button className="bg-primary">Click</button>;
}"""


def _png_bytes(color="red"):
    buffer = io.BytesIO()
    PILImage.new("RGB", (8, 8), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_generate_success(client, db):
    with patch("app.services.v0_service.generate_code", return_value=VALID):
        resp = client.post("/api/generate", json={"prompt": "Create a simple button component"})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "completed"
    assert data["attempts"] == 1
    assert data["template"] == "general"
    assert "export default function SimpleButton" in data["code"]
    assert db.session.get(Generation, data["id"]).status == "completed"


def test_generate_rejects_empty_prompt(client, db):
    with patch("app.services.v0_service.generate_code") as mock_api:
        resp = client.post("/api/generate", json={"prompt": ""})
    assert resp.status_code == 400
    mock_api.assert_not_called()
    assert Generation.query.count() == 0


def test_generate_rejects_oversized_image_before_any_call(client, db, app):
    limit = app.config["MAX_REFERENCE_IMAGE_BYTES"]
    oversized = "data:image/png;base64," + "A" * (limit * 4 // 3 + 1024)

    with patch("app.services.v0_service.generate_code") as mock_api:
        resp = client.post(
            "/api/generate", json={"prompt": "Copy this design", "referenceImage": oversized}
        )

    assert resp.status_code == 400
    assert "too large" in resp.get_json()["error"]
    mock_api.assert_not_called()
    assert Generation.query.count() == 0


def test_generate_rejects_malformed_image(client, db):
    with patch("app.services.v0_service.generate_code") as mock_api:
        resp = client.post(
            "/api/generate",
            json={"prompt": "Copy this", "referenceImage": "data:image/png;base64,not-an-image"},
        )
    assert resp.status_code == 400
    mock_api.assert_not_called()


def test_generate_multipart_reference_image(client, db):
    with patch("app.services.v0_service.generate_code", return_value=VALID) as mock_api:
        resp = client.post(
            "/api/generate",
            data={
                "prompt": "Match this card",
                "reference_image": (io.BytesIO(_png_bytes()), "ref.png", "image/png"),
            },
            content_type="multipart/form-data",
        )

    assert resp.status_code == 200
    reference_image = mock_api.call_args.args[2]
    assert reference_image.startswith("data:image/png;base64,")


def test_generate_upstream_failure(client, db):
    from app.services.v0_service import GenerationAPIError

    error = GenerationAPIError("Client error (401): check the request.", kind="client", status_code=401)
    with patch("app.services.v0_service.generate_code", side_effect=error):
        resp = client.post("/api/generate", json={"prompt": "Button"})

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["details"] == "client"
    assert db.session.get(Generation, body["id"]).status == "failed"


def test_generate_async_runs_inline_without_queue(client, db):
    with patch("app.services.v0_service.generate_code", return_value=VALID):
        resp = client.post("/api/generate", json={"prompt": "Button", "async": True})

    assert resp.status_code == 202
    generation_id = resp.get_json()["id"]
    db.session.expire_all()
    assert db.session.get(Generation, generation_id).status == "completed"


def test_list_generations_newest_first(client, db):
    first = generation_service.create_generation("first")
    second = generation_service.create_generation("second")
    db.session.add(Asset(generation_id=first.id, kind="screenshot", path="screenshots/x.png"))
    db.session.commit()

    resp = client.get("/api/generations?limit=10")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total"] == 2
    ids = [g["id"] for g in data["generations"]]
    assert set(ids) == {first.id, second.id}
    counts = {g["id"]: g["asset_count"] for g in data["generations"]}
    assert counts == {first.id: 1, second.id: 0}


def test_list_generations_limit_bounds(client, db):
    assert client.get("/api/generations?limit=0").status_code == 400
    assert client.get("/api/generations?limit=101").status_code == 400
    assert client.get("/api/generations?limit=abc").status_code == 400
    assert client.get("/api/generations?limit=100").status_code == 200


def test_get_generation_404(client, db):
    resp = client.get("/api/generations/does-not-exist")
    assert resp.status_code == 404


def test_delete_generation_removes_assets_and_files(client, db, screenshot_dir):
    generation = generation_service.create_generation("Card")
    first = generation_service.add_screenshot(generation, _png_bytes("red"))
    second = generation_service.add_screenshot(generation, _png_bytes("blue"))
    paths = [screenshot_dir / first.path, screenshot_dir / second.path]
    assert all(os.path.exists(p) for p in paths)
    assert Asset.query.filter_by(generation_id=generation.id).count() == 2

    resp = client.delete(f"/api/generations/{generation.id}")

    assert resp.status_code == 200
    assert resp.get_json()["deletedFiles"] == 2
    assert not any(os.path.exists(p) for p in paths)
    assert Asset.query.filter_by(generation_id=generation.id).count() == 0
    assert client.get(f"/api/generations/{generation.id}").status_code == 404


def test_delete_survives_file_cleanup_failure(client, db, screenshot_dir):
    generation = generation_service.create_generation("Card")
    generation_service.add_screenshot(generation, _png_bytes())

    with patch("app.services.storage_service.delete", side_effect=OSError("disk gone")):
        resp = client.delete(f"/api/generations/{generation.id}")

    assert resp.status_code == 200
    assert resp.get_json()["failedFiles"] == 1
    assert client.get(f"/api/generations/{generation.id}").status_code == 404


def test_delete_all(client, db, screenshot_dir):
    for prompt in ("a", "b", "c"):
        generation_service.add_screenshot(generation_service.create_generation(prompt), _png_bytes())

    resp = client.delete("/api/generations")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["deleted"] == 3
    assert body["deletedFiles"] == 3
    assert Generation.query.count() == 0
    assert Asset.query.count() == 0


def test_screenshot_upload_and_serving(client, db, screenshot_dir):
    generation = generation_service.create_generation("Card")

    resp = client.post(
        f"/api/generations/{generation.id}/screenshot",
        data={"screenshot": (io.BytesIO(_png_bytes()), "shot.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    url = resp.get_json()["screenshot_url"]
    assert url.startswith("/screenshots/")

    served = client.get(url)
    assert served.status_code == 200
    assert served.data.startswith(b"\x89PNG")


def test_screenshot_upload_rejects_garbage(client, db, screenshot_dir):
    generation = generation_service.create_generation("Card")
    resp = client.post(
        f"/api/generations/{generation.id}/screenshot",
        data={"screenshot": (io.BytesIO(b"not an image"), "shot.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
