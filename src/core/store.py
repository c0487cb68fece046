from __future__ import annotations

import asyncio
import logging
import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_origin

from src.config import settings
from src.core.codecs import Codec, get_codec
from src.core.dirs import resolve_data_dir
from src.core.errors import DecodeError, EmptyFileError, InvalidFilenameError, StoreIOError
from src.core.shared import Guarded, Shared

logger = logging.getLogger(__name__)

T = TypeVar("T")

FILE_MODE = 0o644


def default_for(tp: Any) -> Any:
    """Zero-argument default of a type hint: dict[str, int] -> {}, Model -> Model()."""
    factory = get_origin(tp) or tp
    if not callable(factory):
        raise TypeError(f"No default value for {tp!r}")
    return factory()


def _check_filename(filename: str) -> None:
    if not filename or filename in (".", ".."):
        raise InvalidFilenameError(f"Invalid filename {filename!r}")
    if "\x00" in filename or "/" in filename or os.sep in filename or (os.altsep and os.altsep in filename):
        raise InvalidFilenameError(f"Filename must be a single path component: {filename!r}")
    if Path(filename).is_absolute() or Path(filename).drive:
        raise InvalidFilenameError(f"Filename must be relative: {filename!r}")


def _read_or_create(path: Path) -> bytes:
    # O_CREAT sans O_TRUNC: un fichier jamais écrit se lit vide
    fd = os.open(path, os.O_RDWR | os.O_CREAT, FILE_MODE)
    with os.fdopen(fd, "rb") as f:
        return f.read()


def _write_in_place(path: Path, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _write_atomic(path: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            # mkstemp crée en 0600: on garde le mode du fichier remplacé
            try:
                mode = stat.S_IMODE(os.stat(path).st_mode)
            except FileNotFoundError:
                mode = FILE_MODE
            os.chmod(tmp, mode)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class PersistenceStore:
    """
    Load/save structured values as files of one per-application directory.

    Lenient loads (load_or_default, load_or_value) fall back on a missing,
    empty or corrupt file; load_or_error tells "never written" (EmptyFileError)
    apart from "corrupt" (DecodeError). Saves rewrite the whole file.
    """

    def __init__(self, base_path: str | Path, codec: Codec | None = None, atomic: bool | None = None):
        self._base_path = Path(base_path).resolve()
        self.codec = codec or get_codec(settings.SERDER_CODEC)
        self.atomic = settings.SERDER_ATOMIC_WRITES if atomic is None else atomic

    @classmethod
    async def create(
        cls, app_name: str, codec: Codec | None = None, atomic: bool | None = None
    ) -> PersistenceStore:
        data_dir = resolve_data_dir(app_name)
        if not data_dir.is_dir():
            logger.info("Creating data directory %s", data_dir)
        try:
            await asyncio.to_thread(data_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Cannot create data directory {data_dir}: {e}", data_dir) from e
        return cls(data_dir, codec=codec, atomic=atomic)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def path_for(self, filename: str) -> Path:
        _check_filename(filename)
        return self._base_path / filename

    # --- read path ---

    async def _read_file(self, filename: str) -> bytes:
        path = self.path_for(filename)
        try:
            buf = await asyncio.to_thread(_read_or_create, path)
        except OSError as e:
            raise StoreIOError(f"Cannot read {path}: {e}", path) from e
        logger.debug("Read %d bytes from %s", len(buf), path)
        return buf

    async def _load_lenient(self, filename: str, tp: Any, fallback: Callable[[], Any]) -> Any:
        buf = await self._read_file(filename)
        if not buf:
            return fallback()
        try:
            return self.codec.decode(buf, tp)
        except DecodeError as e:
            logger.warning("Corrupt content in %s, using fallback value: %s", filename, e)
            return fallback()

    async def load_or_default(self, filename: str, tp: Any) -> Any:
        return await self._load_lenient(filename, tp, lambda: default_for(tp))

    async def load_or_value(self, filename: str, fallback: T, tp: Any = None) -> T:
        return await self._load_lenient(filename, type(fallback) if tp is None else tp, lambda: fallback)

    async def load_or_error(self, filename: str, tp: Any) -> Any:
        buf = await self._read_file(filename)
        if not buf:
            raise EmptyFileError(f"File empty: {self.path_for(filename)}")
        return self.codec.decode(buf, tp)

    # --- write path ---

    async def _write_file(self, filename: str, data: bytes) -> None:
        path = self.path_for(filename)
        write = _write_atomic if self.atomic else _write_in_place
        try:
            await asyncio.to_thread(write, path, data)
        except OSError as e:
            raise StoreIOError(f"Cannot write {path}: {e}", path) from e
        logger.debug("Wrote %d bytes to %s", len(data), path)

    async def save_owned(self, filename: str, value: Any, tp: Any = None) -> None:
        _check_filename(filename)
        await self._write_file(filename, self.codec.encode(value, tp))

    async def save_shared(self, filename: str, shared: Shared[Any], tp: Any = None) -> None:
        _check_filename(filename)
        await self._write_file(filename, self.codec.encode(shared.get(), tp))

    async def save_shared_locked(self, filename: str, guarded: Guarded[Any], tp: Any = None) -> None:
        _check_filename(filename)
        async with guarded.borrow() as value:
            data = self.codec.encode(value, tp)
        await self._write_file(filename, data)

    # --- helpers ---

    async def exists(self, filename: str) -> bool:
        """True when the file holds a prior value (present and non-empty)."""
        path = self.path_for(filename)
        try:
            size = (await asyncio.to_thread(path.stat)).st_size
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(f"Cannot stat {path}: {e}", path) from e
        return size > 0

    async def remove(self, filename: str) -> bool:
        path = self.path_for(filename)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(f"Cannot remove {path}: {e}", path) from e
        return True
