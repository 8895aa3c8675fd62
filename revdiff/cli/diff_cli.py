"""`revdiff files` and `revdiff unit` commands."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import click

from revdiff.core.config import GlobalConfig, get_effective_config
from revdiff.core.diff_engine import DiffSegment, compute_structured_diff, segments_to_json, summarize
from revdiff.core.errors import RevdiffError, RevisionArgumentError
from revdiff.core.hunks import HUNK_HEADER_STYLES, HunkHeaderStyle
from revdiff.core.options import DiffOptions
from revdiff.core.revisions import (
    REV_HEAD,
    REV_LIVE,
    DirectoryRevisionSource,
    decode_base64_text,
    diff_revisions,
    select_revision_refs,
)
from revdiff.utils.colorizer import AnsiColorizer, Colorizer, NoColorizer
from revdiff.utils.diff_rendering import render_diff
from revdiff.utils.log import get_logger

logger = get_logger()


def _output_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every diff-producing command."""

    @click.option("-u", "--unified", is_flag=True, default=False, help="Output unified diff format.")
    @click.option(
        "--numbered",
        is_flag=True,
        default=False,
        help="Output the line-numbered format even if unified is configured.",
    )
    @click.option(
        "-c",
        "--color",
        "color_flag",
        is_flag=True,
        default=False,
        help="Colorize the unified diff output (the numbered diff is colored on terminals).",
    )
    @click.option("--no-color", is_flag=True, default=False, help="Never colorize output.")
    @click.option(
        "-U",
        "--context",
        "context_lines",
        type=click.IntRange(min=0),
        default=None,
        help="Lines of context around changes in unified output (default: 3).",
    )
    @click.option(
        "--hunk-header",
        "hunk_header_style",
        type=click.Choice(HUNK_HEADER_STYLES),
        default=None,
        help="How hunk headers count new-side lines.",
    )
    @click.option("--stat", is_flag=True, default=False, help="Only print changed-line totals.")
    @click.option("--json", "as_json", is_flag=True, default=False, help="Print diff segments as JSON.")
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("stat") and kwargs.get("as_json"):
            raise click.UsageError("--stat and --json cannot be used together.")
        return func(*args, **kwargs)

    return wrapper


def _stdout_isatty() -> bool:
    stream = click.get_text_stream("stdout")
    return bool(getattr(stream, "isatty", lambda: False)())


def _use_color(config: GlobalConfig, unified: bool, color_flag: bool, no_color: bool) -> bool:
    if no_color or config.color == "never":
        return False
    if color_flag or config.color == "always":
        return True
    # The numbered view is colored by default, but only on a terminal.
    return not unified and _stdout_isatty()


def _build_options(
    config: GlobalConfig,
    *,
    unified: bool,
    use_color: bool,
    context_lines: Optional[int],
    hunk_header_style: Optional[HunkHeaderStyle],
    old_label: str,
    new_label: str,
) -> DiffOptions:
    return DiffOptions(
        unified=unified,
        colorize=use_color,
        context_lines=config.context_lines if context_lines is None else context_lines,
        hunk_header_style=hunk_header_style or config.hunk_header_style,
        old_label=old_label,
        new_label=new_label,
    )


def _emit(
    segments: Sequence[DiffSegment],
    options: DiffOptions,
    colorizer: Colorizer,
    *,
    stat: bool,
    as_json: bool,
) -> None:
    if as_json:
        click.echo(segments_to_json(segments))
        return
    if stat:
        stats = summarize(segments)
        click.echo(
            f"{options.old_label} -> {options.new_label}: "
            f"{stats.additions} additions and {stats.deletions} removals"
        )
        return

    output = render_diff(segments, options, colorizer)
    if output:
        click.echo(output, nl=False, color=options.colorize)


def _read_input(path: str, decode_base64: bool) -> str:
    if path == "-":
        raw = click.get_binary_stream("stdin").read()
    else:
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise click.FileError(path, hint=str(exc)) from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"{path} is not valid UTF-8: {exc}") from exc
    if decode_base64:
        return decode_base64_text(text.strip(), path)
    return text


@click.command(name="files")
@click.argument("old_path", type=click.Path(dir_okay=False, allow_dash=True))
@click.argument("new_path", type=click.Path(dir_okay=False, allow_dash=True))
@click.option("--old-label", default=None, help="Label for the old side (default: OLD_PATH).")
@click.option("--new-label", default=None, help="Label for the new side (default: NEW_PATH).")
@click.option("--base64", "decode_base64", is_flag=True, default=False, help="Inputs are base64 encoded.")
@_output_options
def files_cmd(
    old_path: str,
    new_path: str,
    old_label: Optional[str],
    new_label: Optional[str],
    decode_base64: bool,
    unified: bool,
    numbered: bool,
    color_flag: bool,
    no_color: bool,
    context_lines: Optional[int],
    hunk_header_style: Optional[HunkHeaderStyle],
    stat: bool,
    as_json: bool,
) -> None:
    """Show differences between two local files.

    Pass - for one of the paths to read it from stdin.
    """
    if old_path == "-" and new_path == "-":
        raise click.UsageError("Only one side can be read from stdin.")

    config = get_effective_config(Path.cwd())
    try:
        old_text = _read_input(old_path, decode_base64)
        new_text = _read_input(new_path, decode_base64)
    except RevdiffError as exc:
        raise click.ClickException(str(exc)) from exc

    unified = (unified or config.unified) and not numbered
    use_color = _use_color(config, unified, color_flag, no_color)
    options = _build_options(
        config,
        unified=unified,
        use_color=use_color,
        context_lines=context_lines,
        hunk_header_style=hunk_header_style,
        old_label=old_label or old_path,
        new_label=new_label or new_path,
    )
    logger.info(
        "[cli] Diffing files",
        extra={"old_path": old_path, "new_path": new_path, "unified": options.unified},
    )

    segments = compute_structured_diff(old_text, new_text)
    colorizer: Colorizer = AnsiColorizer(config.colors) if use_color else NoColorizer()
    _emit(segments, options, colorizer, stat=stat, as_json=as_json)


@click.command(name="unit")
@click.argument("unit_slug")
@click.argument("revisions", nargs=-1)
@click.option("--from", "from_rev", default=REV_LIVE, show_default=True, help="Source revision.")
@click.option("--to", "to_rev", default=REV_HEAD, show_default=True, help="Target revision.")
@click.option("--space", default=None, help="Space slug (default: configured default_space).")
@click.option(
    "--store",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding exported units (default: configured store_path).",
)
@_output_options
def unit_cmd(
    unit_slug: str,
    revisions: tuple[str, ...],
    from_rev: str,
    to_rev: str,
    space: Optional[str],
    store: Optional[str],
    unified: bool,
    numbered: bool,
    color_flag: bool,
    no_color: bool,
    context_lines: Optional[int],
    hunk_header_style: Optional[HunkHeaderStyle],
    stat: bool,
    as_json: bool,
) -> None:
    """Show differences between revisions of a unit.

    \b
    Positional revisions (cannot be mixed with --from/--to):
      revdiff unit my-unit                # live vs head
      revdiff unit my-unit 12             # live vs 12
      revdiff unit my-unit 12 15          # 12 vs 15
    Flags:
      revdiff unit my-unit --from=12      # 12 vs head
      revdiff unit my-unit --to=15        # live vs 15
    """
    config = get_effective_config(Path.cwd())
    space = space or config.default_space
    store = store or config.store_path
    if not space:
        raise click.UsageError("No space given; pass --space or set default_space.")
    if not store:
        raise click.UsageError("No revision store given; pass --store or set store_path.")

    try:
        from_ref, to_ref = select_revision_refs(revisions, from_rev, to_rev)
    except RevisionArgumentError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        result = diff_revisions(DirectoryRevisionSource(store), space, unit_slug, from_ref, to_ref)
    except RevdiffError as exc:
        logger.warning(
            "[cli] Revision diff failed: %s: %s",
            type(exc).__name__,
            exc,
            extra={"space": space, "unit": unit_slug},
        )
        raise click.ClickException(str(exc)) from exc

    unified = (unified or config.unified) and not numbered
    use_color = _use_color(config, unified, color_flag, no_color)
    options = _build_options(
        config,
        unified=unified,
        use_color=use_color,
        context_lines=context_lines,
        hunk_header_style=hunk_header_style,
        old_label=result.old_label,
        new_label=result.new_label,
    )
    colorizer: Colorizer = AnsiColorizer(config.colors) if use_color else NoColorizer()
    _emit(result.segments, options, colorizer, stat=stat, as_json=as_json)


__all__ = ["files_cmd", "unit_cmd"]
