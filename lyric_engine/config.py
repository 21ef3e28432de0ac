from __future__ import annotations

import json
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from lyric_engine.strip.brackets import PRESETS
from lyric_engine.strip.stripper import StripOptions, TitleArtistHint

logger = logging.getLogger(__name__)

# credit-line keywords seen in the wild; user keywords are merged on top
DEFAULT_STRIP_KEYWORDS: tuple[str, ...] = (
    "作词",
    "作曲",
    "编曲",
    "词",
    "曲",
    "制作人",
    "监制",
    "出品",
    "发行",
    "录音",
    "混音",
    "母带",
    "和声",
    "和声编唱",
    "人声编辑",
    "吉他",
    "贝斯",
    "鼓",
    "弦乐",
    "OP",
    "SP",
    "lyrics",
    "lyricist",
    "composer",
    "composed by",
    "written by",
    "arranger",
    "arranged by",
    "producer",
    "produced by",
    "mixing",
    "mixed by",
    "mastering",
    "mastered by",
    "recording",
)
DEFAULT_STRICT_PATTERNS: tuple[str, ...] = (
    r"^\s*(?:tme|qq音乐).*(?:著作权|版权)",
    r"未经.*许可.*不得",
)


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyric-engine"
    return Path.home() / ".config" / "lyric-engine"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class EngineConfig:
    config_dir: Path

    # Metadata stripping
    strip_enabled: bool
    strip_keywords: tuple[str, ...]
    strip_patterns: tuple[str, ...]
    soft_patterns: tuple[str, ...]

    # Playback
    offset_ms: int
    max_keep: int

    # Export
    encoding: str
    include_translation: bool
    include_romanization: bool

    # Formatting
    bracket_preset: str
    custom_bracket: str


def _split_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(s.strip() for s in raw.split(",") if s.strip())


def _as_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, list):
        return tuple(str(v) for v in value if str(v).strip())
    return ()


def _merge(*groups: Iterable[str]) -> tuple[str, ...]:
    # keep first-seen order, drop duplicates
    return tuple(dict.fromkeys(s for g in groups for s in g))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw not in ("0", "false", "False", "no", "")


def _load_file(config_dir: Path) -> dict[str, Any]:
    cfg_path = config_dir / "config.json"
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", cfg_path)
        return {}
    return data


def load_config() -> EngineConfig:
    # Priority: LYRIC_ENGINE_* env → config.json → defaults; list values are merged
    config_dir = _config_dir()
    data = _load_file(config_dir)

    preset = os.getenv("LYRIC_ENGINE_BRACKET_PRESET") or str(data.get("bracket_preset", "dash"))
    if preset not in PRESETS:
        logger.warning("Unknown bracket preset %r, using 'dash'", preset)
        preset = "dash"

    return EngineConfig(
        config_dir=config_dir,
        strip_enabled=_env_bool("LYRIC_ENGINE_STRIP", bool(data.get("strip_enabled", False))),
        strip_keywords=_merge(
            DEFAULT_STRIP_KEYWORDS, _as_list(data.get("strip_keywords")), _split_env("LYRIC_ENGINE_STRIP_KEYWORDS")
        ),
        strip_patterns=_merge(
            DEFAULT_STRICT_PATTERNS, _as_list(data.get("strip_patterns")), _split_env("LYRIC_ENGINE_STRIP_PATTERNS")
        ),
        soft_patterns=_merge(_as_list(data.get("soft_patterns")), _split_env("LYRIC_ENGINE_SOFT_PATTERNS")),
        offset_ms=int(os.getenv("LYRIC_ENGINE_OFFSET_MS", data.get("offset_ms", 0))),
        max_keep=int(os.getenv("LYRIC_ENGINE_MAX_KEEP", data.get("max_keep", 3))),
        encoding=(os.getenv("LYRIC_ENGINE_ENCODING") or str(data.get("encoding", "utf-8"))).lower(),
        include_translation=_env_bool(
            "LYRIC_ENGINE_INCLUDE_TRANSLATION", bool(data.get("include_translation", True))
        ),
        include_romanization=_env_bool(
            "LYRIC_ENGINE_INCLUDE_ROMANIZATION", bool(data.get("include_romanization", False))
        ),
        bracket_preset=preset,
        custom_bracket=os.getenv("LYRIC_ENGINE_CUSTOM_BRACKET") or str(data.get("custom_bracket", "-")),
    )


def strip_options(cfg: EngineConfig, title: str | None = None, artists: Iterable[str] = ()) -> StripOptions:
    names = tuple(a for a in artists if a)
    hint = TitleArtistHint(title=title, artists=names) if title and names else None
    return StripOptions(
        keywords=cfg.strip_keywords,
        strict_patterns=cfg.strip_patterns,
        soft_patterns=cfg.soft_patterns,
        title_hint=hint,
    )


def save_config_value(key: str, value: Any) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data = _load_file(cfg_path.parent)
    data[key] = value
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
