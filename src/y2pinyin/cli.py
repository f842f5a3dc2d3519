"""Command-line interface using Click."""

import sys
from pathlib import Path

import click

from . import __version__
from .cli_commands import (
    run_lyrics_command,
    run_play_command,
    run_search_command,
    run_serve_command,
    run_video_command,
)
from .config import POLL_INTERVAL, SEARCH_LIMIT, SERVER_HOST, SERVER_PORT
from .exceptions import Y2PinyinError
from .utils.logging import setup_logging


def _run(ctx, fn, **kwargs):
    """Run a command helper, turning library errors into exit code 1."""
    logger = ctx.obj['logger']
    try:
        return fn(logger=logger, **kwargs)
    except Y2PinyinError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.pass_context
def cli(ctx, verbose, log_file):
    """Y2Pinyin - Follow Chinese songs on YouTube with pinyin lyrics."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose
    )
    ctx.obj['logger'] = logger
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('query')
@click.option('--limit', type=int, default=SEARCH_LIMIT, show_default=True,
              help='Maximum number of results to list')
@click.pass_context
def search(ctx, query, limit):
    """Search LRCLIB for lyrics matching QUERY."""
    _run(ctx, run_search_command, query=query, limit=limit)


@cli.command()
@click.argument('url_or_query')
@click.option('--query', '-q', help='Override the lyrics search query')
@click.option('--pick', '-p', type=int, default=1, show_default=True,
              help='Which search result to use (1 = best match)')
@click.option('--no-pinyin', is_flag=True, help='Hide the pinyin annotation')
@click.option('--no-times', is_flag=True, help='Hide line timestamps')
@click.pass_context
def lyrics(ctx, url_or_query, query, pick, no_pinyin, no_times):
    """Print pinyin-annotated lyrics for a YouTube URL or search query."""
    _run(
        ctx,
        run_lyrics_command,
        url_or_query=url_or_query,
        query=query,
        pick=pick,
        show_pinyin=not no_pinyin,
        show_times=not no_times,
    )


@cli.command()
@click.argument('url')
@click.option('--query', '-q', help='Override the lyrics search query')
@click.option('--pick', '-p', type=int, default=1, show_default=True,
              help='Which search result to use (1 = best match)')
@click.option('--no-time-query', is_flag=True,
              help="Don't ask the player for its position; estimate it instead")
@click.option('--interval', type=float, default=POLL_INTERVAL, show_default=True,
              help='Seconds between time updates')
@click.option('--no-pinyin', is_flag=True, help='Hide the pinyin annotation')
@click.option('--no-controls', is_flag=True,
              help="Don't read line-jump and retry commands from stdin")
@click.pass_context
def play(ctx, url, query, pick, no_time_query, interval, no_pinyin, no_controls):
    """Play a YouTube video in mpv with synchronized lyrics."""
    _run(
        ctx,
        run_play_command,
        url=url,
        query=query,
        pick=pick,
        time_query=not no_time_query,
        interval=interval,
        show_pinyin=not no_pinyin,
        controls=not no_controls,
    )


@cli.command()
@click.option('--host', default=SERVER_HOST, show_default=True, help='Interface to bind')
@click.option('--port', type=int, default=SERVER_PORT, show_default=True, help='Port to listen on')
@click.option('--static-dir', type=click.Path(exists=True, file_okay=False),
              help='Directory with the web client (default: bundled)')
@click.pass_context
def serve(ctx, host, port, static_dir):
    """Serve the web client and lyrics API."""
    _run(ctx, run_serve_command, host=host, port=port,
         static_dir=Path(static_dir) if static_dir else None)


@cli.command()
@click.argument('url')
@click.pass_context
def video(ctx, url):
    """Show YouTube metadata and the derived lyrics search query."""
    _run(ctx, run_video_command, url=url)


if __name__ == '__main__':
    cli()
