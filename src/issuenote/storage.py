"""Note storage.

The sync engine sees storage only through :class:`VaultStorage`: read, modify
(content and mtime together), rename, create, delete and list. :class:`LocalVault`
implements it on a plain directory of Markdown files; paths are vault-relative
POSIX strings so they look the same on every platform.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

NOTE_SUFFIX = ".md"


@dataclass(frozen=True)
class FileHandle:
    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        """Display name of the note: file name without extension."""
        return PurePosixPath(self.path).stem

    @property
    def parent(self) -> str:
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent


@dataclass(frozen=True)
class FileStat:
    path: str
    mtime: int  # epoch milliseconds


def join_path(parent: str, name: str) -> str:
    parent = parent.strip("/")
    return f"{parent}/{name}" if parent else name


class VaultStorage(Protocol):
    def read(self, handle: FileHandle) -> str: ...

    def modify(self, handle: FileHandle, text: str, *, mtime: int | None = None) -> None: ...

    def rename(self, handle: FileHandle, new_path: str) -> None: ...

    def create(self, path: str, text: str) -> FileHandle: ...

    def delete(self, handle: FileHandle) -> None: ...

    def list(self) -> list[FileStat]: ...


class LocalVault:
    """Filesystem-backed storage rooted at ``root``."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _abs(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path escapes vault root: {path}")
        return target

    def handle_for(self, path: str | Path) -> FileHandle:
        """Build a handle from a vault-relative or absolute path."""
        candidate = Path(path)
        absolute = candidate.resolve() if candidate.is_absolute() else self._abs(str(candidate))
        try:
            relative = absolute.relative_to(self.root)
        except ValueError as exc:
            raise ValueError(f"{path} is outside the vault {self.root}") from exc
        return FileHandle(relative.as_posix())

    def read(self, handle: FileHandle) -> str:
        return self._abs(handle.path).read_text(encoding="utf-8")

    def modify(self, handle: FileHandle, text: str, *, mtime: int | None = None) -> None:
        target = self._abs(handle.path)
        if not target.exists():
            raise FileNotFoundError(handle.path)
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        if mtime is not None:
            ns = mtime * 1_000_000
            os.utime(tmp, ns=(ns, ns))
        tmp.replace(target)

    def rename(self, handle: FileHandle, new_path: str) -> None:
        source = self._abs(handle.path)
        target = self._abs(new_path)
        if target == source:
            return
        if target.exists():
            raise FileExistsError(new_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        source.rename(target)

    def create(self, path: str, text: str) -> FileHandle:
        target = self._abs(path)
        if target.exists():
            raise FileExistsError(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return FileHandle(target.relative_to(self.root).as_posix())

    def delete(self, handle: FileHandle) -> None:
        self._abs(handle.path).unlink()

    def list(self) -> list[FileStat]:
        out: list[FileStat] = []
        for entry in sorted(self.root.rglob(f"*{NOTE_SUFFIX}")):
            if not entry.is_file():
                continue
            out.append(
                FileStat(
                    path=entry.relative_to(self.root).as_posix(),
                    mtime=entry.stat().st_mtime_ns // 1_000_000,
                )
            )
        return out


__all__ = [
    "FileHandle",
    "FileStat",
    "LocalVault",
    "NOTE_SUFFIX",
    "VaultStorage",
    "join_path",
]
