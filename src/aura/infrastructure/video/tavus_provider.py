"""
Video Generation Provider

Talking-head video generation behind a small interface. The Tavus
implementation submits a script to a replica and reports job status.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from aura.config.logging_config import get_logger
from aura.config.settings import TavusSettings
from aura.domain.enums.check_in import VideoStatus
from aura.domain.exceptions import TransportError

logger = get_logger(__name__)


@dataclass(frozen=True)
class VideoJob:
    """
    Provider view of a video job.

    Attributes:
        job_id: Provider job identifier
        status: Current job status
        download_ref: Deliverable reference once completed
    """

    job_id: str
    status: VideoStatus
    download_ref: Optional[str] = None


class VideoGenerationProvider(ABC):
    """Script + persona -> job; job id -> status."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def submit(self, script: str, persona_id: Optional[str] = None) -> VideoJob:
        """
        Start a video job.

        Raises:
            TransportError: If submission fails
        """
        pass

    @abstractmethod
    async def status(self, job_id: str) -> VideoJob:
        """
        Fetch the current job status.

        Raises:
            TransportError: If the status call fails
        """
        pass


class TavusVideoProvider(VideoGenerationProvider):
    """Tavus v2 video API."""

    def __init__(
        self,
        settings: TavusSettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = settings.api_key.get_secret_value()
        self._base_url = settings.base_url.rstrip("/")
        self._default_persona = settings.persona_id
        self._timeout = settings.timeout_seconds
        self._client = client

    @property
    def provider_name(self) -> str:
        return "tavus"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        headers = {"x-api-key": self._api_key}
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(
                f"Tavus request failed: {e}",
                provider=self.provider_name,
                is_retryable=True,
                original_error=e,
            ) from e

    def _parse(self, data: dict) -> VideoJob:
        if not data.get("video_id"):
            raise TransportError("Tavus response has no video_id", provider=self.provider_name)
        try:
            status = VideoStatus(data.get("status", "pending"))
        except ValueError:
            # Unknown intermediate states are treated as still running
            status = VideoStatus.GENERATING
        return VideoJob(
            job_id=str(data["video_id"]),
            status=status,
            download_ref=data.get("download_url") or data.get("stream_url"),
        )

    async def submit(self, script: str, persona_id: Optional[str] = None) -> VideoJob:
        if not self.is_configured():
            raise TransportError("Tavus API key not configured", provider=self.provider_name)

        data = await self._request(
            "POST",
            f"{self._base_url}/videos",
            json={
                "script": script,
                "replica_id": persona_id or self._default_persona,
                "replica_settings": {"emotion": "neutral", "pace": "normal"},
            },
        )
        job = self._parse(data)
        logger.info("Tavus video submitted", job_id=job.job_id, status=job.status.value)
        return job

    async def status(self, job_id: str) -> VideoJob:
        data = await self._request("GET", f"{self._base_url}/videos/{job_id}")
        return self._parse(data)
