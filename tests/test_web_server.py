import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pydantic import ValidationError as PydanticValidationError

from gif2spritesheet.web.server import GenerationRequest, create_app


@pytest.fixture
def client():
    return TestClient(create_app())


def test_generation_request_parses_colors_and_blank_columns():
    req = GenerationRequest.model_validate(
        {
            "background_color": "10,20,30,40",
            "columns": "",
            "frame_skip": 2,
        }
    )
    assert req.background_color == (10, 20, 30, 40)
    assert req.columns is None
    assert req.to_config().frame_skip == 2


@pytest.mark.parametrize("columns", [0, -1])
def test_generation_request_rejects_non_positive_columns(columns):
    with pytest.raises(PydanticValidationError):
        GenerationRequest.model_validate({"columns": columns})


def test_generate_rejects_zero_columns(client, gif_path):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("anim.gif", gif_path.read_bytes(), "image/gif")},
        data={"settings": json.dumps({"output_size": 32, "columns": 0})},
    )
    assert response.status_code == 422


def test_generation_request_transparent_background():
    assert GenerationRequest.model_validate({"background_color": "transparent"}).background_color is None
    assert GenerationRequest.model_validate({"background_color": [1, 2, 3]}).background_color == (1, 2, 3, 255)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_generate_returns_png(client, gif_path):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("anim.gif", gif_path.read_bytes(), "image/gif")},
        data={"settings": json.dumps({"output_size": 48, "columns": 3})},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert 'filename="sprite-sheet.png"' in response.headers["content-disposition"]
    assert response.headers["x-grid-columns"] == "3"
    assert response.headers["x-grid-rows"] == "1"
    assert response.headers["x-frame-count"] == "3"
    with Image.open(io.BytesIO(response.content)) as img:
        assert img.size == (48, 48)


def test_generate_rejects_non_gif(client):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("clip.png", b"\x89PNG", "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload a GIF file"


def test_generate_rejects_corrupt_gif(client):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("anim.gif", b"GIF89a\x02\x00\x02\x00\x00\x00\x00garbage", "image/gif")},
    )
    assert response.status_code == 400


def test_generate_rejects_invalid_settings(client, gif_path):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("anim.gif", gif_path.read_bytes(), "image/gif")},
        data={"settings": json.dumps({"output_size": 0})},
    )
    assert response.status_code == 422


def test_generate_rejects_bad_json(client, gif_path):
    response = client.post(
        "/api/spritesheet",
        files={"file": ("anim.gif", gif_path.read_bytes(), "image/gif")},
        data={"settings": "{nope"},
    )
    assert response.status_code == 400
