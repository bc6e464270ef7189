import argparse
import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from . import __version__
from .config import Settings, configure_logging
from .context import RuntimeContext
from .errors import NothingScrobbledError, ScrobblerError
from .lastfm import Track, submit_scrobbles
from .sources import album_tracks, fetch_page_tracks, single_track
from .timeline import MAX_OFFSET, parse_offset, plan_timeline

log = logging.getLogger(__name__)


def _offset_arg(value: str) -> timedelta:
    try:
        offset = parse_offset(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None
    if offset > MAX_OFFSET:
        raise argparse.ArgumentTypeError(f"offset {value!r} is more than {MAX_OFFSET.days} days ago")
    return offset


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Subcommands are ``auth``, ``scrobble`` (one track or a whole album) and
    ``scrobble-url``. Offsets are parsed and bounded while parsing, so a bad
    value exits with the usage code before anything touches the network.

    Returns:
        The configured ArgumentParser
    """
    p = argparse.ArgumentParser(
        prog="offline-scrobbler",
        description="Scrobble music to Last.fm that was played offline.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    auth = sub.add_parser("auth", help="Authorize this tool with Last.fm and store the session key")
    auth.add_argument("--api-key", required=True, help="Last.fm API key")
    auth.add_argument("--secret-key", required=True, help="Last.fm shared secret")
    auth.add_argument("--no-browser", action="store_true", help="Only print the authorization URL")

    offset_help = "How long ago the listening started, e.g. 90, 10m, 1h30m (default: just finished)"

    scrobble = sub.add_parser("scrobble", help="Scrobble a track or a whole album")
    scrobble.add_argument("--artist", required=True, help="Artist name")
    what = scrobble.add_mutually_exclusive_group(required=True)
    what.add_argument("--track", help="Track name")
    what.add_argument("--album", help="Album name; every track is scrobbled")
    scrobble.add_argument("--offset", type=_offset_arg, default=timedelta(0), help=offset_help)
    scrobble.add_argument("-d", "--dryrun", action="store_true", help="Plan timestamps but send nothing")

    by_url = sub.add_parser("scrobble-url", help="Scrobble every track of an album web page")
    by_url.add_argument("--url", required=True, help="Album page URL (Last.fm, Bandcamp, ...)")
    by_url.add_argument("--offset", type=_offset_arg, default=timedelta(0), help=offset_help)
    by_url.add_argument("-d", "--dryrun", action="store_true", help="Plan timestamps but send nothing")

    return p


def _scrobble_tracks(ctx: RuntimeContext, tracks: list[Track], offset: timedelta, dryrun: bool) -> None:
    config = ctx.sessions.require_session()

    now = datetime.now(UTC)
    entries = plan_timeline(
        tracks,
        now,
        offset,
        default_duration=timedelta(seconds=ctx.settings.default_track_duration),
    )

    total = len(entries)
    for i, e in enumerate(entries, start=1):
        album = f" [{e.track.album}]" if e.track.album else ""
        log.info(
            "%d/%d %s - %s%s at %s",
            i,
            total,
            e.track.artist,
            e.track.track,
            album,
            e.started_at.astimezone().isoformat(timespec="seconds"),
        )

    if dryrun:
        log.info("Dry run: %d scrobble(s) not sent", total)
        return

    response = submit_scrobbles(ctx.api, config, entries)
    for entry, verdict in zip(entries, response.verdicts):
        line = "%d/%d %s - %s: %s"
        args = (verdict.index + 1, total, entry.track.artist, entry.track.track, verdict.describe())
        if verdict.accepted:
            log.info(line, *args)
        else:
            log.warning(line, *args)

    if response.accepted_count == 0:
        raise NothingScrobbledError(f"None of {total} track(s) were accepted by Last.fm")
    log.info("Scrobbled %d of %d track(s)", response.accepted_count, total)


def run(settings: Settings, args: argparse.Namespace, ctx: RuntimeContext | None = None) -> None:
    """Run one subcommand."""
    ctx = ctx or RuntimeContext.build(settings)

    if args.command == "auth":
        ctx.sessions.authenticate(args.api_key, args.secret_key, open_browser=not args.no_browser)
        log.info("Session key stored in %s", ctx.store.config_file)
    elif args.command == "scrobble":
        if args.track:
            tracks = single_track(args.artist, args.track)
        else:
            config = ctx.sessions.require_session()
            tracks = album_tracks(ctx.api, config.api_key, args.artist, args.album)
        _scrobble_tracks(ctx, tracks, args.offset, args.dryrun)
    elif args.command == "scrobble-url":
        ctx.sessions.require_session()
        tracks = fetch_page_tracks(ctx.api, args.url)
        _scrobble_tracks(ctx, tracks, args.offset, args.dryrun)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the offline-scrobbler command; returns the exit code."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        run(settings, args)
    except ScrobblerError as e:
        log.error("%s", e)
        return e.exit_code
    except KeyboardInterrupt:
        log.info("Interrupted")
        return 130

    log.info("Done")
    return 0
