from __future__ import annotations

from pathlib import Path

from colorama import Fore, Style, just_fix_windows_console
import typer

from lyric_engine.config import load_config, strip_options
from lyric_engine.errors import LyricEngineError, UnsupportedFormatError
from lyric_engine.export.ass import export_ass
from lyric_engine.export.lrc import export_json, export_lrc
from lyric_engine.export.ttml import export_ttml
from lyric_engine.logging_setup import setup_logging
from lyric_engine.lrc.align import align_lines
from lyric_engine.lrc.detect import detect_format
from lyric_engine.lrc.model import AlignTarget, LrcFormat, LyricDocument
from lyric_engine.lrc.parse import parse_lrc_with_stats, parse_smart
from lyric_engine.processor import ExportOptions, looks_like_qrc
from lyric_engine.qrc.parse import QrcParser
from lyric_engine.strip.brackets import replace_brackets, resolve_bracket_style
from lyric_engine.strip.stripper import strip_metadata
from lyric_engine.sync.tracker import resolve_active_index


app = typer.Typer(no_args_is_help=True, add_completion=False)

EXPORT_FORMATS = ("lrc", "ttml", "ass", "json")


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _load_document(path: Path) -> LyricDocument:
    text = _read(path)
    if looks_like_qrc(text):
        return LyricDocument(format=LrcFormat.QRC, lines=tuple(QrcParser().parse_content(text)))
    return parse_smart(text)


def _load_secondary(path: Path | None) -> LyricDocument | None:
    return _load_document(path) if path else None


def render(doc: LyricDocument, fmt: str, title: str, artist: str, options: ExportOptions) -> str:
    fmt_l = fmt.lower()
    if fmt_l == "json":
        return export_json(doc)
    if fmt_l == "lrc":
        return export_lrc(doc.lines, options.include_translation, options.include_romanization) + "\n"
    if fmt_l == "ttml":
        return export_ttml(
            doc.lines,
            options.include_translation,
            options.include_romanization,
            title=title or "Lyrics",
            encoding=options.encoding,
        )
    if fmt_l == "ass":
        return export_ass(
            doc.lines,
            title=title or "Unknown Title",
            artist=artist or "Unknown Artist",
            include_translation=options.include_translation,
            include_romanization=options.include_romanization,
        )
    raise UnsupportedFormatError(f"format must be one of: {', '.join(EXPORT_FORMATS)}")


@app.callback()
def main_callback(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    setup_logging(debug)


@app.command()
def detect(lrc_path: Path):
    """Print the detected lyric format."""
    text = _read(lrc_path)
    typer.echo(LrcFormat.QRC.value if looks_like_qrc(text) else detect_format(text).value)


@app.command()
def parse(lrc_path: Path):
    """Parse LRC and print stats."""
    doc, stats = parse_lrc_with_stats(_read(lrc_path))
    typer.echo(f"format={doc.format.value}")
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
    typer.echo(f"lines_ignored={stats.lines_ignored}")
    typer.echo(f"events_total={stats.events_total}")
    typer.echo(f"lyric_lines={len(doc.lines)}")
    typer.echo(f"offset_ms={doc.offset_ms}")
    typer.echo(f"tags={doc.tags or {}}")


@app.command()
def export(
    lrc_path: Path,
    fmt: str = typer.Option("lrc", "--format", case_sensitive=False, help="lrc|ttml|ass|json"),
    translation: Path | None = typer.Option(None, "--translation", help="Translation track (LRC)"),
    roman: Path | None = typer.Option(None, "--roman", help="Romanization track (LRC or QRC)"),
    title: str = typer.Option("", "--title", help="Song title"),
    artist: str = typer.Option("", "--artist", help="Song artist"),
    strip: bool | None = typer.Option(None, "--strip/--no-strip", help="Remove credit lines at head and tail"),
    brackets: bool = typer.Option(False, "--brackets", help="Replace brackets using the configured style"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Convert a lyric file to LRC/TTML/ASS/JSON, merging secondary tracks."""
    cfg = load_config()
    doc = _load_document(lrc_path)
    lines = list(doc.lines)

    for path, target in ((translation, AlignTarget.TRANSLATION), (roman, AlignTarget.ROMANIZATION)):
        secondary = _load_secondary(path)
        if secondary and secondary.lines:
            lines = align_lines(lines, secondary.lines, target)

    if strip is None:
        strip = cfg.strip_enabled
    if strip:
        lines = strip_metadata(lines, strip_options(cfg, title, [artist]))
    if brackets:
        lines = replace_brackets(lines, resolve_bracket_style(cfg.bracket_preset, cfg.custom_bracket))

    try:
        options = ExportOptions(
            include_translation=cfg.include_translation or translation is not None,
            include_romanization=cfg.include_romanization or roman is not None,
            encoding=cfg.encoding,
        )
        data = render(
            LyricDocument(format=doc.format, lines=tuple(lines), tags=doc.tags, offset_ms=doc.offset_ms),
            fmt,
            title,
            artist,
            options,
        )
    except LyricEngineError as e:
        raise typer.BadParameter(str(e)) from e

    if out:
        # transcoding to the declared encoding happens here, at the file boundary
        out.write_text(data, encoding=options.encoding, errors="replace")
    else:
        typer.echo(data, nl=False)


@app.command()
def strip(
    lrc_path: Path,
    title: str | None = typer.Option(None, "--title", help="Song title"),
    artist: list[str] = typer.Option([], "--artist", help="Song artist (repeatable)"),
):
    """Print lyrics with credit lines removed."""
    cfg = load_config()
    doc = _load_document(lrc_path)
    lines = strip_metadata(doc.lines, strip_options(cfg, title, artist))
    typer.echo(f"removed={len(doc.lines) - len(lines)}", err=True)
    typer.echo(export_lrc(lines))


@app.command()
def resolve(
    lrc_path: Path,
    at: int = typer.Option(..., "--at", help="Playback position (ms)"),
    offset: int | None = typer.Option(None, "--offset", help="User offset (ms)"),
    context_lines: int = typer.Option(2, "--context", help="Lines above/below the active line"),
):
    """Show which line is active at a playback position."""
    cfg = load_config()
    doc = _load_document(lrc_path)
    offset_ms = cfg.offset_ms if offset is None else offset
    idx = resolve_active_index(at, doc.lines, offset_ms, cfg.max_keep)
    typer.echo(f"index={idx}")
    if idx < 0:
        return

    just_fix_windows_console()
    lo = max(0, idx - context_lines)
    hi = min(len(doc.lines), idx + context_lines + 1)
    for i in range(lo, hi):
        text = doc.lines[i].text
        if i == idx:
            typer.echo(f"{Fore.GREEN}{Style.BRIGHT}> {text}{Style.RESET_ALL}")
        else:
            typer.echo(f"{Style.DIM}  {text}{Style.RESET_ALL}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
