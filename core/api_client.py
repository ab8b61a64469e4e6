import logging
import mimetypes
import os

import httpx

from core.config import API_URL, HTTP_TIMEOUT
from core.errors import (
    AuthenticationError,
    NetworkError,
    RoleNotAssignedError,
    error_from_response,
)

logger = logging.getLogger(__name__)


def image_part(path: str, field: str = "image"):
    """Multipart file tuple for an image on disk."""
    content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    with open(path, "rb") as fh:
        return {field: (os.path.basename(path), fh.read(), content_type)}


def form_fields(payload: dict) -> dict:
    """Flatten a JSON payload into multipart text fields."""
    fields = {}
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            fields[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            fields[key] = [str(v) for v in value]
        else:
            fields[key] = str(value)
    return fields


class ApiClient:
    """
    Thin wrapper around one httpx.Client pointed at the REST backend.

    Adds the bearer token, turns failures into typed errors and logs the
    user out on a 401 (except the "no role assigned yet" case). Nothing is
    retried.
    """

    def __init__(self, base_url: str = API_URL, session=None, transport=None, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # ===================== REQUEST PIPELINE =====================

    def _headers(self) -> dict:
        headers = {}
        token = self.session.token if self.session is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, json=None, data=None, files=None, params=None):
        try:
            response = self._client.request(
                method,
                path,
                json=json if files is None else None,
                data=data,
                files=files,
                params=params,
                headers=self._headers(),
            )
        except httpx.HTTPError as ex:
            logger.error("%s %s failed: %s", method, path, ex)
            raise NetworkError(f"Could not reach the server ({ex.__class__.__name__})", ex) from ex

        if response.is_success:
            return self._body(response)

        payload = self._body(response)
        error = error_from_response(response.status_code, payload)
        logger.error("%s %s -> %s %s", method, path, response.status_code, error.message)
        if isinstance(error, AuthenticationError) and not isinstance(error, RoleNotAssignedError):
            if self.session is not None:
                self.session.logout()
        raise error

    @staticmethod
    def _body(response: httpx.Response):
        if not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, json=None, data=None, files=None):
        return self.request("POST", path, json=json, data=data, files=files)

    def put(self, path, json=None, data=None, files=None):
        return self.request("PUT", path, json=json, data=data, files=files)

    def patch(self, path, json=None):
        return self.request("PATCH", path, json=json)

    def delete(self, path):
        return self.request("DELETE", path)

    def send_with_image(self, method: str, path: str, payload: dict, image_path: str = None):
        """JSON body without an image, multipart form with an `image` part otherwise."""
        if not image_path:
            return self.request(method, path, json=payload)
        return self.request(method, path, data=form_fields(payload), files=image_part(image_path))

    def upload(self, path: str, file_path: str, field: str = "file"):
        return self.request("POST", path, files=image_part(file_path, field))

    def download(self, path: str, dest: str) -> str:
        """Stream a binary resource (Excel templates, QR code images) to `dest`."""
        try:
            with self._client.stream("GET", path, headers=self._headers()) as response:
                if not response.is_success:
                    response.read()
                    raise error_from_response(response.status_code, self._body(response))
                with open(dest, "wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
        except httpx.HTTPError as ex:
            logger.error("Download %s failed: %s", path, ex)
            raise NetworkError(f"Could not reach the server ({ex.__class__.__name__})", ex) from ex
        return dest
