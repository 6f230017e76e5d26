"""
Audio Store

Stores voice notes and synthesized responses and hands back an
opaque reference string that is saved on the entry.

PRIVACY: Voice notes are health data. The local store is meant for
development; production deployments should back this with
encrypted object storage.
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from uuid import UUID, uuid4

from aura.config.logging_config import get_logger
from aura.domain.exceptions import PersistenceError

logger = get_logger(__name__)


class AudioStore(ABC):
    """Binary audio storage addressed by reference strings."""

    @abstractmethod
    async def save(self, user_id: UUID, data: bytes, extension: str, kind: str) -> str:
        """
        Store audio.

        Args:
            user_id: Owning user
            data: Encoded audio
            extension: File extension without dot
            kind: voice_note or response

        Returns:
            Reference string

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def load(self, ref: str) -> bytes:
        pass


class LocalAudioStore(AudioStore):
    """
    Filesystem-backed store.

    References look like "local://<user_id>/<kind>/<uuid>.<ext>".
    """

    SCHEME = "local://"

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _path_for(self, ref: str) -> Path:
        if not ref.startswith(self.SCHEME):
            raise PersistenceError(f"Unsupported audio reference: {ref}")
        relative = Path(ref[len(self.SCHEME):])
        path = (self._root / relative).resolve()
        if self._root.resolve() not in path.parents:
            raise PersistenceError(f"Audio reference escapes store root: {ref}")
        return path

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save(self, user_id: UUID, data: bytes, extension: str, kind: str) -> str:
        ref = f"{self.SCHEME}{user_id}/{kind}/{uuid4()}.{extension}"
        try:
            await asyncio.to_thread(self._write, self._path_for(ref), data)
        except OSError as e:
            logger.error("Audio write failed", kind=kind, error=str(e))
            raise PersistenceError("Could not store audio") from e
        logger.debug("Audio stored", kind=kind, size=len(data))
        return ref

    async def load(self, ref: str) -> bytes:
        try:
            return await asyncio.to_thread(self._path_for(ref).read_bytes)
        except OSError as e:
            raise PersistenceError(f"Could not read audio {ref}") from e
