from __future__ import annotations

import io
import json
import os
import time
import urllib.error
import urllib.request
import uuid

from PIL import Image


def _wait_http_ok(url: str, timeout_seconds: float = 40.0) -> bytes:
    deadline = time.time() + timeout_seconds
    last_error: Exception | None = None
    while time.time() < deadline:
        try:
            with urllib.request.urlopen(url, timeout=3.0) as response:  # noqa: S310
                if response.status == 200:
                    return response.read()
        except Exception as exc:  # noqa: BLE001
            last_error = exc
        time.sleep(0.5)
    raise RuntimeError(f"timed out waiting for HTTP 200 at {url}: {last_error}")


def _assert_probes(api_base: str) -> None:
    health_payload = json.loads(_wait_http_ok(f"{api_base}/healthz").decode("utf-8"))
    ready_payload = json.loads(_wait_http_ok(f"{api_base}/readyz").decode("utf-8"))
    assert health_payload.get("status") == "ok", health_payload
    assert ready_payload.get("status") == "ready", ready_payload
    assert "pillow-image" in ready_payload.get("strategies", []), ready_payload


def _multipart(fields: dict[str, str], filename: str, payload: bytes, content_type: str):
    boundary = uuid.uuid4().hex
    body = io.BytesIO()
    for name, value in fields.items():
        body.write(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    body.write(
        f'--{boundary}\r\nContent-Disposition: form-data; name="file"; '
        f'filename="{filename}"\r\nContent-Type: {content_type}\r\n\r\n'.encode()
    )
    body.write(payload)
    body.write(f"\r\n--{boundary}--\r\n".encode())
    return body.getvalue(), f"multipart/form-data; boundary={boundary}"


def _post_convert(api_base: str, target: str, filename: str, payload: bytes, content_type: str):
    body, header = _multipart({"targetType": target}, filename, payload, content_type)
    request = urllib.request.Request(  # noqa: S310
        f"{api_base}/api/convert",
        data=body,
        headers={"Content-Type": header},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=30.0) as response:  # noqa: S310
            return response.status, dict(response.headers), response.read()
    except urllib.error.HTTPError as exc:
        return exc.code, dict(exc.headers), exc.read()


def _assert_image_conversion(api_base: str) -> None:
    buffer = io.BytesIO()
    Image.new("RGBA", (8, 8), (0, 128, 255, 200)).save(buffer, format="PNG")

    status, headers, body = _post_convert(
        api_base, "image/jpeg", "smoke.png", buffer.getvalue(), "image/png"
    )
    assert status == 200, body
    assert body.startswith(b"\xff\xd8"), body[:16]
    assert "smoke_converted.jpg" in headers.get("content-disposition", ""), headers


def _assert_unsupported(api_base: str) -> None:
    status, _, body = _post_convert(
        api_base, "application/pdf", "notes.txt", b"hello", "text/plain"
    )
    assert status == 415, body
    assert json.loads(body)["detail"]["kind"] == "unsupported_conversion", body


def main() -> None:
    api_base = os.getenv("CONVERTER_API_BASE", "http://converter-api:8090")

    _assert_probes(api_base)
    _assert_image_conversion(api_base)
    _assert_unsupported(api_base)

    print("converter HTTP smoke checks passed")


if __name__ == "__main__":
    main()
