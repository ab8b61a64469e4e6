import httpx
import pytest

from conftest import BASE_URL, make_token
from core.api_client import ApiClient, form_fields
from core.errors import (
    ApiError,
    AuthenticationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    RoleNotAssignedError,
    describe_error,
)
from models.user import Role


def test_bearer_token_is_sent(api, backend, session):
    token = make_token()
    session.login(token, Role.ADMIN)
    backend.on("GET", "/users/me", {"id": 1, "name": "Asha", "role": 0})
    api.get("/users/me")
    assert backend.requests[-1].headers["Authorization"] == f"Bearer {token}"


def test_no_authorization_header_without_session(api, backend):
    backend.on("GET", "/categories", [])
    api.get("/categories")
    assert "Authorization" not in backend.requests[-1].headers


def test_401_logs_out_and_raises(api, backend, session):
    session.login(make_token(), Role.CHEF)
    backend.on("GET", "/orders", {"message": "Invalid token"}, status=401)
    with pytest.raises(AuthenticationError):
        api.get("/orders")
    assert session.token is None


def test_401_without_role_keeps_session(api, backend, session):
    session.login(make_token())
    backend.on("POST", "/users/login", {"message": "User has not been assigned a role"}, status=401)
    with pytest.raises(RoleNotAssignedError):
        api.post("/users/login", json={"email": "a@b.co", "password": "secret"})
    assert session.token is not None


@pytest.mark.parametrize("status, error", [(404, NotFoundError), (409, ConflictError), (500, ApiError)])
def test_status_codes_map_to_typed_errors(api, backend, status, error):
    backend.on("GET", "/items/9", {"error": "nope"}, status=status)
    with pytest.raises(error) as info:
        api.get("/items/9")
    assert info.value.status_code == status
    assert info.value.message == "nope"


def test_transport_failure_becomes_network_error(session):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient(base_url=BASE_URL, session=session, transport=httpx.MockTransport(refuse))
    with pytest.raises(NetworkError) as info:
        client.get("/orders")
    assert "Network error" in describe_error(info.value, "load orders")
    client.close()


def test_send_with_image_uses_multipart(api, backend, tmp_path):
    image = tmp_path / "paneer.png"
    image.write_bytes(b"\x89PNG fake")
    backend.on("POST", "/categories", {"id": 3, "name": "Starters"})
    api.send_with_image("POST", "/categories", {"name": "Starters", "active": True}, str(image))
    request = backend.requests[-1]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="image"; filename="paneer.png"' in request.content
    assert b"Starters" in request.content


def test_send_without_image_uses_json(api, backend):
    backend.on("POST", "/categories", {"id": 3, "name": "Starters"})
    api.send_with_image("POST", "/categories", {"name": "Starters"})
    assert backend.requests[-1].headers["content-type"] == "application/json"
    assert backend.last_json() == {"name": "Starters"}


def test_download_writes_file(api, backend, tmp_path):
    backend.on("GET", "/items/excel-template/download", b"PK\x03\x04 excel bytes")
    dest = tmp_path / "items.xlsx"
    assert api.download("/items/excel-template/download", str(dest)) == str(dest)
    assert dest.read_bytes() == b"PK\x03\x04 excel bytes"


def test_form_fields_flatten_values():
    assert form_fields({"a": True, "b": 2.5, "c": None, "tags": ["x", "y"]}) == {
        "a": "true",
        "b": "2.5",
        "tags": ["x", "y"],
    }


def test_describe_error_names_action():
    error = ApiError(400, "Price is required")
    assert describe_error(error, "save item") == "Failed to save item: Price is required"
