"""Low-level HTTP wrapper for the Custom Vision REST API.

Wraps ``requests.Session`` with key-header injection, content-type
detection and service-error decoding.  All configuration comes from a
:class:`coilvision.models.config.CustomVisionConfig` Pydantic model.

No global state -- everything is instance-based.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import requests

from coilvision.errors import CustomVisionError
from coilvision.models.config import CustomVisionConfig

logger = logging.getLogger("coilvision.cv")

TRAINING_PATH = "customvision/v3.3/training"
PREDICTION_PATH = "customvision/v3.0/prediction"

_DOWNLOAD_CHUNK = 1024 * 1024


class CustomVisionAPI:
    """Low-level Custom Vision client for the training and prediction APIs.

    Parameters
    ----------
    config:
        Connection settings expressed as a ``CustomVisionConfig`` model.
    session:
        Optional pre-built session (tests inject one).
    """

    def __init__(
        self,
        config: CustomVisionConfig,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        endpoint = config.endpoint.rstrip("/")
        self._training_url = f"{endpoint}/{TRAINING_PATH}"
        self._prediction_url = f"{endpoint}/{PREDICTION_PATH}"
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def training_url(self) -> str:
        return self._training_url

    @property
    def prediction_url(self) -> str:
        return self._prediction_url

    @property
    def session(self) -> requests.Session:
        return self._session

    # ------------------------------------------------------------------
    # Core request method
    # ------------------------------------------------------------------

    def request(
        self,
        url: str,
        method: str = "get",
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
        key_header: str = "Training-Key",
        key: str | None = None,
    ) -> Any:
        """Make an HTTP request with the API key injected.

        Parameters
        ----------
        url:
            Full URL to request.
        method:
            HTTP method (``get``, ``post``).
        params:
            Query parameters.
        json:
            JSON body.
        data:
            Raw body, sent as ``application/octet-stream``.
        key_header, key:
            Header carrying the API key; *key* defaults to the training key.

        Returns
        -------
        Any
            Parsed JSON, or ``None`` for an empty body.

        Raises
        ------
        CustomVisionError
            On any HTTP or transport error.
        """
        headers = {key_header: key if key is not None else self.config.training_key.get_secret_value()}
        if data is not None:
            headers["Content-Type"] = "application/octet-stream"

        method = method.lower()
        logger.debug("HTTP %s %s params=%s", method.upper(), url, params)

        try:
            resp = self._session.request(
                method.upper(),
                url,
                params=params,
                json=json,
                data=data,
                headers=headers,
                timeout=self.config.timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise _error_from_response(exc.response) from exc
        except requests.RequestException as exc:
            logger.debug("Transport error for %s: %s", url, exc)
            raise CustomVisionError(str(exc)) from exc

        return self._parse_response(resp)

    # ------------------------------------------------------------------
    # Convenience methods
    # ------------------------------------------------------------------

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``{training_url}/{endpoint}``."""
        return self.request(f"{self._training_url}/{endpoint}", params=params)

    def post(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
    ) -> Any:
        """POST ``{training_url}/{endpoint}``."""
        return self.request(
            f"{self._training_url}/{endpoint}", method="post",
            params=params, json=json, data=data,
        )

    def predict_post(self, endpoint: str, data: bytes) -> Any:
        """POST raw image bytes to ``{prediction_url}/{endpoint}``."""
        return self.request(
            f"{self._prediction_url}/{endpoint}", method="post", data=data,
            key_header="Prediction-Key", key=self.config.prediction_key_value,
        )

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------

    def download(self, url: str, dest: str | Path) -> Path:
        """Stream *url* to *dest*.

        The URL is a pre-signed blob link, so no key header is sent.  A
        partially written file is removed when the transfer fails.
        """
        dest = Path(dest)
        logger.debug("Downloading %s -> %s", url, dest)
        try:
            with self._session.get(url, stream=True, timeout=self.config.timeout) as resp:
                resp.raise_for_status()
                with open(dest, "wb") as fh:
                    for chunk in resp.iter_content(chunk_size=_DOWNLOAD_CHUNK):
                        if chunk:
                            fh.write(chunk)
        except requests.HTTPError as exc:
            _remove_partial(dest)
            raise _error_from_response(exc.response) from exc
        except requests.RequestException as exc:
            _remove_partial(dest)
            raise CustomVisionError(f"Download failed: {exc}") from exc
        except OSError:
            _remove_partial(dest)
            raise
        return dest

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse_response(self, resp: requests.Response) -> Any:
        """Inspect Content-Type and return the appropriate Python object."""
        content_type = resp.headers.get("content-type", "")
        if content_type.startswith("application/json") and resp.text:
            return resp.json()
        if resp.text:
            logger.debug("Unexpected content-type %r; returning raw text", content_type)
            return resp.text
        return None


def _error_from_response(resp: requests.Response | None) -> CustomVisionError:
    """Decode a service error body into a :class:`CustomVisionError`."""
    if resp is None:
        return CustomVisionError("No response from service")

    code = None
    message = resp.reason or "HTTP error"
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        err = body.get("error", body)
        if isinstance(err, dict):
            code = err.get("code") or None
            message = err.get("message") or message

    logger.debug("Service error %s %s: %s", resp.status_code, code, message)
    return CustomVisionError(message, status=resp.status_code, code=code)


def _remove_partial(dest: Path) -> None:
    try:
        os.remove(dest)
    except FileNotFoundError:
        pass
