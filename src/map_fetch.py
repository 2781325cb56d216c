"""Static map image retrieval.

- Default image collaborator for `MapRequestBuilder.get_map`
- GETs the already-built URL; the API key (if any) is passed as a separate
  `key` query parameter so the built URL itself is never modified
- Retries 429/5xx and transport errors with exponential backoff + jitter
- Decodes the body with Pillow
- Writes one JSONL record per attempt (PII-safe: no key, no coordinates)
"""

from __future__ import annotations

import datetime as dt
import json
import os
import random
import threading
import time
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from PIL import Image

import config_loader  # type: ignore
from map_errors import MapFetchError  # type: ignore

DEFAULT_RETRY = config_loader.RetryPolicy(
    max_attempts=3, base_seconds=0.5, jitter_seconds=0.25
)

_RETRYABLE_HTTP = {429, 500, 502, 503, 504}


# Isolated for unit-test monkeypatching
def _http_get(url: str, params: Dict[str, Any], timeout: float) -> requests.Response:
    return requests.get(url, params=params, timeout=timeout)


class JsonlLogger:
    def __init__(self, path: Optional[str]) -> None:
        self.path = path
        self._lock = threading.Lock()
        if path:
            Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)

    def write(self, rec: Dict[str, Any]) -> None:
        if not self.path:
            return
        line = json.dumps(rec, ensure_ascii=False)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")


def _decode_image(content: bytes) -> Image.Image:
    img = Image.open(BytesIO(content))
    img.load()
    return img


def fetch_map_image(
    url: str,
    api_key: Optional[str] = None,
    retry: Optional[config_loader.RetryPolicy] = None,
    timeout: float = 15,
    logger: Optional[JsonlLogger] = None,
    http_get=None,
) -> Image.Image:
    """Download and decode the map image at `url`.

    Raises `MapFetchError` once retries are exhausted, on a non-retryable
    HTTP status, or when the body is not a decodable image.
    """
    retry = retry or DEFAULT_RETRY
    logger = logger or JsonlLogger(None)
    # Resolved at call time so tests can monkeypatch the module-level hook
    http_get = http_get or _http_get
    params = {"key": api_key} if api_key else {}
    last_status = "UNKNOWN_ERROR"

    for attempt in range(1, retry.max_attempts + 1):
        started = dt.datetime.now(dt.timezone.utc).isoformat()
        try:
            resp = http_get(url, params=params, timeout=timeout)
            http_status = resp.status_code
            last_status = f"HTTP_{http_status}"

            if http_status == 200:
                try:
                    img = _decode_image(resp.content)
                except OSError as e:  # includes UnidentifiedImageError
                    logger.write(
                        {
                            "ts": started,
                            "attempt": attempt,
                            "url_length": len(url),
                            "http_status": http_status,
                            "fetch_status": "DECODE_ERROR",
                        }
                    )
                    raise MapFetchError(
                        f"Response body is not a decodable image: {e}",
                        status="DECODE_ERROR",
                    ) from e
                logger.write(
                    {
                        "ts": started,
                        "attempt": attempt,
                        "url_length": len(url),
                        "http_status": http_status,
                        "fetch_status": "OK",
                        "image_size": list(img.size),
                    }
                )
                return img

            logger.write(
                {
                    "ts": started,
                    "attempt": attempt,
                    "url_length": len(url),
                    "http_status": http_status,
                    "fetch_status": last_status,
                }
            )
            if http_status not in _RETRYABLE_HTTP:
                # Not retryable (bad request, denied key, ...)
                raise MapFetchError(
                    f"Static map request failed with HTTP {http_status}",
                    status=last_status,
                )
        except requests.RequestException as e:
            last_status = f"EXC_{e.__class__.__name__}"
            logger.write(
                {
                    "ts": started,
                    "attempt": attempt,
                    "url_length": len(url),
                    "http_status": None,
                    "fetch_status": last_status,
                }
            )

        # Backoff if not last attempt
        if attempt < retry.max_attempts:
            base = retry.base_seconds * (2 ** (attempt - 1))
            jitter = random.uniform(0, retry.jitter_seconds)
            time.sleep(base + jitter)

    raise MapFetchError(
        f"Static map request failed after {retry.max_attempts} attempts "
        f"(last status: {last_status})",
        status=last_status,
    )


def save_map_image(img: Image.Image, output_path: str) -> str:
    out_dir = os.path.dirname(output_path) or "."
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    img.save(output_path)
    return output_path
