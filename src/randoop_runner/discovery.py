"""Find loadable target classes of a package inside compiled class roots."""

from __future__ import annotations

import logging
import re
import struct
import zipfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

_CLASS_MAGIC = 0xCAFEBABE
_ARCHIVE_SUFFIXES = (".jar", ".zip")
_SKIPPED_SIMPLE_NAMES = {"package-info", "module-info"}
# Anonymous and local classes compile to Outer$1, Outer$1Local.
_SYNTHETIC_SEGMENT_RE = re.compile(r"\$\d")

ACC_INTERFACE = 0x0200
ACC_ANNOTATION = 0x2000
ACC_MODULE = 0x8000

# Constant pool entry payload sizes by tag; Utf8 (1) is length-prefixed.
_CONSTANT_SIZES = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long
    6: 8,  # Double
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}
_WIDE_CONSTANTS = {5, 6}


class DiscoveryError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class ClassEntry:
    """One compiled class found under a root."""

    class_name: str
    access_flags: int
    origin: str

    @property
    def is_interface(self) -> bool:
        return bool(self.access_flags & (ACC_INTERFACE | ACC_ANNOTATION | ACC_MODULE))


class ClassFinder:
    """Enumerate concrete classes of a package (and its sub-packages)."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def find(self, package_name: str, roots: Iterable[Path]) -> set[str]:
        """Return fully qualified names of the target classes in ``package_name``.

        Interfaces and annotation types are dropped; a missing root, unreadable
        archive, or malformed class file raises :class:`DiscoveryError`.
        """

        found: set[str] = set()
        for entry in self.iter_entries(package_name, roots):
            if entry.is_interface:
                self._logger.info(
                    "%s removed from queue because it is an interface",
                    entry.class_name,
                )
                continue
            found.add(entry.class_name)
        self._logger.info("Discovered %d class(es) in package %s", len(found), package_name)
        return found

    def iter_entries(self, package_name: str, roots: Iterable[Path]) -> Iterator[ClassEntry]:
        package_path = package_name.replace(".", "/").strip("/")
        for root in roots:
            if root.is_dir():
                yield from _iter_directory(root, package_path)
            elif root.is_file() and root.suffix.lower() in _ARCHIVE_SUFFIXES:
                yield from _iter_archive(root, package_path)
            elif root.exists():
                self._logger.debug("Skipping non-class root %s", root)
            else:
                raise DiscoveryError(f"Classpath root does not exist: {root}")


def _iter_directory(root: Path, package_path: str) -> Iterator[ClassEntry]:
    package_dir = root / package_path if package_path else root
    if not package_dir.is_dir():
        return
    for path in sorted(package_dir.rglob("*.class")):
        relative = path.relative_to(root).as_posix()
        class_name = _class_name_from_path(relative)
        if class_name is None:
            continue
        try:
            data = path.read_bytes()
        except OSError as error:
            raise DiscoveryError(f"Cannot read class file {path}: {error}") from error
        yield ClassEntry(
            class_name=class_name,
            access_flags=read_access_flags(data, origin=str(path)),
            origin=str(path),
        )


def _iter_archive(root: Path, package_path: str) -> Iterator[ClassEntry]:
    prefix = f"{package_path}/" if package_path else ""
    try:
        with zipfile.ZipFile(root) as archive:
            for name in sorted(archive.namelist()):
                if not name.startswith(prefix) or not name.endswith(".class"):
                    continue
                class_name = _class_name_from_path(name)
                if class_name is None:
                    continue
                origin = f"{root}!/{name}"
                yield ClassEntry(
                    class_name=class_name,
                    access_flags=read_access_flags(archive.read(name), origin=origin),
                    origin=origin,
                )
    except (OSError, zipfile.BadZipFile) as error:
        raise DiscoveryError(f"Cannot read archive {root}: {error}") from error


def _class_name_from_path(relative_path: str) -> str | None:
    if relative_path.startswith("META-INF/"):
        return None
    stem = relative_path.removesuffix(".class")
    simple_name = stem.rsplit("/", 1)[-1]
    if simple_name in _SKIPPED_SIMPLE_NAMES:
        return None
    if _SYNTHETIC_SEGMENT_RE.search(simple_name):
        return None
    return stem.replace("/", ".")


def read_access_flags(data: bytes, *, origin: str = "<bytes>") -> int:
    """Return the ``access_flags`` of a class file, skipping its constant pool."""

    try:
        magic, _minor, _major, pool_count = struct.unpack_from(">IHHH", data, 0)
        if magic != _CLASS_MAGIC:
            raise DiscoveryError(f"Not a class file (bad magic): {origin}")
        offset = 10
        index = 1
        while index < pool_count:
            tag = data[offset]
            offset += 1
            if tag == 1:
                (length,) = struct.unpack_from(">H", data, offset)
                offset += 2 + length
            elif tag in _CONSTANT_SIZES:
                offset += _CONSTANT_SIZES[tag]
            else:
                raise DiscoveryError(f"Unknown constant pool tag {tag} in {origin}")
            index += 2 if tag in _WIDE_CONSTANTS else 1
        (access_flags,) = struct.unpack_from(">H", data, offset)
    except (struct.error, IndexError) as error:
        raise DiscoveryError(f"Truncated class file: {origin}") from error
    return access_flags


def simple_name(class_name: str) -> str:
    """``com.example.Outer$Inner`` -> ``Inner``."""
    return class_name.rsplit(".", 1)[-1].rsplit("$", 1)[-1]


def package_of(class_name: str) -> str:
    return class_name.rpartition(".")[0]
