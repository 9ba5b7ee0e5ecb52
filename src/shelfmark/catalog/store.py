"""Document store primitives used by the catalog repository."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar

from .errors import AlreadyExistsError, NotFoundError, StoreIOError
from .paths import DOCUMENT_SUFFIX, normalize_path

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentStore(Protocol):
    """Scoped document store operations supplied by the host.

    Paths are ``/``-separated and relative to the store root, which is the
    empty path. Single-document operations are expected to be atomic; nothing
    else is.
    """

    async def read(self, path: str) -> str: ...

    async def write(self, path: str, text: str) -> None: ...

    async def create(self, path: str, text: str) -> None: ...

    async def delete(self, path: str) -> None: ...

    async def rename(self, source: str, destination: str) -> None: ...

    async def exists(self, path: str) -> bool: ...

    async def is_document(self, path: str) -> bool: ...

    async def list_documents(self) -> list[str]: ...

    async def list_folders(self) -> list[str]: ...

    async def ensure_folder(self, path: str) -> None: ...


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts if part not in (".", ".."))


class LocalDocumentStore:
    """Store markdown documents in a directory on the local filesystem.

    Blocking filesystem calls run in worker threads so callers are only
    suspended, never blocked. Hidden files and folders are not listed.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the store.

        Args:
            root: Directory that holds the catalog.
        """
        self._root = root.expanduser().resolve()

    @property
    def root(self) -> Path:
        """Return the resolved store root."""
        return self._root

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        return await self._run(path, target.read_text, encoding="utf-8")

    async def write(self, path: str, text: str) -> None:
        target = self._resolve(path)

        def _write() -> None:
            if not target.is_file():
                raise FileNotFoundError(str(target))
            target.write_text(text, encoding="utf-8")

        await self._run(path, _write)

    async def create(self, path: str, text: str) -> None:
        target = self._resolve(path)

        def _create() -> None:
            with target.open("x", encoding="utf-8") as handle:
                handle.write(text)

        await self._run(path, _create)

    async def delete(self, path: str) -> None:
        await self._run(path, self._resolve(path).unlink)

    async def rename(self, source: str, destination: str) -> None:
        source_path = self._resolve(source)
        destination_path = self._resolve(destination)

        def _rename() -> None:
            if destination_path.exists():
                raise FileExistsError(str(destination_path))
            source_path.rename(destination_path)

        await self._run(destination, _rename)

    async def exists(self, path: str) -> bool:
        return await self._run(path, self._resolve(path).exists)

    async def is_document(self, path: str) -> bool:
        target = self._resolve(path)
        if target.suffix != DOCUMENT_SUFFIX:
            return False
        return await self._run(path, target.is_file)

    async def list_documents(self) -> list[str]:
        def _scan() -> list[str]:
            return [
                relative.as_posix()
                for relative in self._walk()
                if relative.suffix == DOCUMENT_SUFFIX and (self._root / relative).is_file()
            ]

        return await self._run("", _scan)

    async def list_folders(self) -> list[str]:
        def _scan() -> list[str]:
            return [
                relative.as_posix()
                for relative in self._walk()
                if (self._root / relative).is_dir()
            ]

        return await self._run("", _scan)

    async def ensure_folder(self, path: str) -> None:
        target = self._resolve(path)

        def _mkdir() -> None:
            if target.exists() and not target.is_dir():
                raise NotADirectoryError(str(target))
            target.mkdir(parents=True, exist_ok=True)

        await self._run(path, _mkdir)

    def _walk(self) -> list[Path]:
        if not self._root.is_dir():
            return []
        entries: list[Path] = []
        for candidate in self._root.rglob("*"):
            relative = candidate.relative_to(self._root)
            if _is_hidden(relative):
                continue
            entries.append(relative)
        return entries

    def _resolve(self, path: str) -> Path:
        normalized = normalize_path(path)
        target = (self._root / normalized).resolve() if normalized else self._root
        if target != self._root and self._root not in target.parents:
            raise StoreIOError(f"Path {path} is outside store root {self._root}")
        return target

    async def _run(self, path: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except FileExistsError as exc:
            raise AlreadyExistsError(f"Document already exists: {path}") from exc
        except FileNotFoundError as exc:
            raise NotFoundError(f"No document at {path}") from exc
        except OSError as exc:
            LOGGER.warning("Store operation failed for %s: %s", path, exc)
            raise StoreIOError(f"Store operation failed for {path}: {exc}") from exc


__all__ = ["DocumentStore", "LocalDocumentStore"]
