from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path, PurePosixPath

logger = logging.getLogger("BoopPony")


class PonyAsset(Enum):
    RESTING = auto()
    BOOPED_1 = auto()
    BOOPED_2 = auto()
    BOOPED_3 = auto()
    BOOPED_4 = auto()
    CUTIE_MARK = auto()
    INACTIVE = auto()
    SCARED = auto()
    FRAME = auto()
    BROKEN = auto()


# Matched case-insensitively against the end of each archive member path.
ASSET_SUFFIXES: dict[PonyAsset, str] = {
    PonyAsset.RESTING: "/0.png",
    PonyAsset.BOOPED_1: "/1.png",
    PonyAsset.BOOPED_2: "/2.png",
    PonyAsset.BOOPED_3: "/3.png",
    PonyAsset.BOOPED_4: "/4.png",
    PonyAsset.CUTIE_MARK: "/cm.png",
    PonyAsset.INACTIVE: "/inactivity.png",
    PonyAsset.SCARED: "/move.png",
    PonyAsset.FRAME: "/layout.png",
}

# Packs carry no dedicated image for these.
ASSET_FALLBACKS: dict[PonyAsset, PonyAsset] = {
    PonyAsset.BROKEN: PonyAsset.BOOPED_4,
}


class PonyPackError(Exception):
    """A pony pack archive is unreadable or incomplete."""


@dataclass(slots=True)
class PonyPack:
    name: str
    assets: dict[PonyAsset, bytes]
    source_path: Path | None = None
    folder_name: str = ""
    members: dict[PonyAsset, str] = field(default_factory=dict)

    def asset_bytes(self, asset: PonyAsset) -> bytes:
        if asset in self.assets:
            return self.assets[asset]
        fallback = ASSET_FALLBACKS.get(asset)
        if fallback is not None and fallback in self.assets:
            return self.assets[fallback]
        return b""


def extract_pony_name(folder_name: str) -> str:
    """``0_ShyPony`` -> ``Shy Pony``; the leading ``prefix_`` is dropped."""
    joined = " ".join(folder_name.split("_")[1:])
    spaced = re.sub(r"([A-Z])", r" \1", joined)
    return " ".join(spaced.split())


def load_pony_pack(data: bytes | Path, source_path: Path | None = None) -> PonyPack:
    if isinstance(data, Path):
        source_path = source_path or data
        try:
            data = data.read_bytes()
        except OSError as exc:
            raise PonyPackError(f"Cannot read pony pack {data}: {exc}") from exc

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise PonyPackError(f"Not a zip archive: {source_path or '<memory>'}") from exc

    with archive:
        member_names = [
            info.filename for info in archive.infolist() if not info.is_dir()
        ]
        assets: dict[PonyAsset, bytes] = {}
        members: dict[PonyAsset, str] = {}
        folder_name = ""
        for asset, suffix in ASSET_SUFFIXES.items():
            # A leading "/" lets root-level members match too.
            match = next(
                (name for name in member_names if f"/{name}".lower().endswith(suffix)),
                None,
            )
            if match is None:
                raise PonyPackError(f"No file found for {asset.name} state.")
            assets[asset] = archive.read(match)
            members[asset] = match
            parent = PurePosixPath(match).parent.name
            if parent:
                folder_name = parent

    name = extract_pony_name(folder_name) if folder_name else ""
    if not name and source_path is not None:
        name = extract_pony_name(source_path.stem) or source_path.stem
    return PonyPack(
        name=name or "Pony",
        assets=assets,
        source_path=source_path,
        folder_name=folder_name,
        members=members,
    )


class PonyLoader:
    """Scan a directory of pony pack zips."""

    def __init__(self, ponies_dir: Path):
        self._ponies_dir = ponies_dir
        self._packs: dict[str, PonyPack] = {}

    @property
    def ponies_dir(self) -> Path:
        return self._ponies_dir

    @property
    def packs(self) -> list[PonyPack]:
        return list(self._packs.values())

    def scan(self) -> list[PonyPack]:
        self._packs.clear()
        if not self._ponies_dir.is_dir():
            logger.warning("[PonyLoader] pony directory missing: %s", self._ponies_dir)
            return []

        for zip_path in sorted(self._ponies_dir.glob("*.zip")):
            try:
                pack = load_pony_pack(zip_path)
            except PonyPackError as exc:
                logger.error("[PonyLoader] failed to load %s: %s", zip_path.name, exc)
                continue
            if pack.name in self._packs:
                logger.warning("[PonyLoader] duplicate pony name %s in %s", pack.name, zip_path.name)
                continue
            self._packs[pack.name] = pack
            logger.info("[PonyLoader] loaded %s from %s", pack.name, zip_path.name)
        return self.packs

    def names(self) -> list[str]:
        return list(self._packs)

    def get(self, name: str) -> PonyPack | None:
        return self._packs.get(name)
