"""HTTP client for the remote transcription endpoint."""

from __future__ import annotations

import json
import logging
import threading
from typing import Optional, Protocol

import httpx

from ..audio.wav import WAV_MIME_TYPE
from ..config import TransportConfig
from ..errors import EndpointNotConfigured, HttpStatusError, NetworkError, TranscriptionError

LOGGER = logging.getLogger("chunkscribe.transport")


class Transcriber(Protocol):
    def transcribe(self, wav_bytes: bytes) -> str: ...

    def cancel(self) -> None: ...


class HttpTranscriber:
    """POSTs WAV chunks and extracts the transcript from the response.

    When no client is injected the transcriber owns one; ``cancel`` closes it
    and the next call opens a new one. A sync httpx request already on the
    wire is not interrupted by that and runs until it answers or times out.
    """

    def __init__(self, config: TransportConfig, *, client: Optional[httpx.Client] = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(timeout=self.config.timeout)
            return self._client

    def _headers(self) -> dict:
        headers = {}
        if not self.config.use_form_data:
            headers["Content-Type"] = WAV_MIME_TYPE
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def transcribe(self, wav_bytes: bytes) -> str:
        url = self.config.endpoint_url.strip()
        if not url:
            raise EndpointNotConfigured("Configure the transcription endpoint URL")
        client = self._get_client()
        try:
            if self.config.use_form_data:
                files = {self.config.file_field or "file": ("audio.wav", wav_bytes, WAV_MIME_TYPE)}
                data = {}
                if self.config.model:
                    data["model"] = self.config.model
                if self.config.language:
                    data["language"] = self.config.language
                resp = client.post(url, headers=self._headers(), files=files, data=data)
            else:
                resp = client.post(url, headers=self._headers(), content=wav_bytes)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Transcription request failed: {exc}") from exc
        except RuntimeError as exc:
            # httpx raises RuntimeError when the client was closed by cancel().
            raise NetworkError(f"Transcription request aborted: {exc}") from exc
        if not resp.is_success:
            raise HttpStatusError(resp.status_code, resp.text)
        return self._extract_text(resp)

    def _extract_text(self, resp: httpx.Response) -> str:
        content_type = resp.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            return resp.text
        try:
            payload = resp.json()
        except ValueError as exc:
            raise TranscriptionError(f"Invalid response: {exc}") from exc
        if not isinstance(payload, dict):
            return ""
        result = payload.get(self.config.text_field or "text")
        if result is None:
            result = payload.get("transcript")
        if result is None:
            return ""
        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False)

    def cancel(self) -> None:
        if not self._owns_client:
            return
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            LOGGER.debug("Closing transcription client after cancel")
            client.close()

    def close(self) -> None:
        if not self._owns_client:
            return
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()


__all__ = ["HttpTranscriber", "Transcriber"]
