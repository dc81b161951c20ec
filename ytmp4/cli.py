#!/usr/bin/env python3
"""
ytmp4 CLI Tool
Download a YouTube video as an MP4 file
"""

import argparse
import time
import sys
from typing import List, Optional

from rich.console import Console
from rich.filesize import decimal
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ytmp4 import __version__
from ytmp4.constants import ConfigContract
from ytmp4.download import (
    DownloadConfig,
    DownloadError,
    DownloadManager,
    DownloadObserver,
    DownloadRequest,
    estimate_progress,
    get_error_suggestion,
    parse_quality,
)
from ytmp4.sources import YtDlpSource
from ytmp4.utils import init_logging, load_key, log_event

EXIT_OK = 0
EXIT_FAILURE = 1


class ConsoleObserver(DownloadObserver):
    """Spinner while resolving the video, progress bar while copying bytes"""

    def __init__(self, console: Console, config: DownloadConfig):
        self.console = console
        self.config = config
        self.status = None
        self.progress = None
        self.task_id = None
        self.started_at = None

    def on_stage(self, message: str):
        if self.status is None:
            self.status = self.console.status(message)
            self.status.start()
        else:
            self.status.update(message)

    def on_start(self, metadata, rendition, output_path: str):
        self._stop_status()
        self.console.print(f"Downloading: [bold]{escape(metadata.title)}[/bold] ({escape(rendition.describe())})")
        self.progress = Progress(
            SpinnerColumn(),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("{task.fields[downloaded]}"),
            TextColumn("{task.fields[speed]}"),
            TimeElapsedColumn(),
            console=self.console,
        )
        # bar tracks a fraction so unknown sizes can use the capped estimate
        self.task_id = self.progress.add_task(
            "download",
            total=1.0,
            downloaded=self._size_text(0, rendition.content_length),
            speed="",
        )
        self.started_at = time.monotonic()
        self.progress.start()

    def on_progress(self, bytes_so_far: int, expected_total_bytes: Optional[int]):
        if self.progress is None:
            return
        fraction = estimate_progress(
            bytes_so_far,
            expected_total_bytes,
            cap=self.config.progress_cap,
            unknown_size_estimate_mb=self.config.unknown_size_estimate_mb,
        )
        self.progress.update(
            self.task_id,
            completed=fraction,
            downloaded=self._size_text(bytes_so_far, expected_total_bytes),
            speed=self._speed_text(bytes_so_far),
        )

    def complete(self):
        if self.progress is not None:
            self.progress.update(self.task_id, completed=1.0)

    def close(self):
        self._stop_status()
        if self.progress is not None:
            self.progress.stop()
            self.progress = None

    def _stop_status(self):
        if self.status is not None:
            self.status.stop()
            self.status = None

    @staticmethod
    def _size_text(bytes_so_far: int, expected_total_bytes: Optional[int]) -> str:
        if expected_total_bytes:
            return f"{decimal(bytes_so_far)}/{decimal(expected_total_bytes)}"
        return decimal(bytes_so_far)

    def _speed_text(self, bytes_so_far: int) -> str:
        if self.started_at is None:
            return ""
        elapsed = time.monotonic() - self.started_at
        if elapsed <= 0:
            return ""
        return f"{decimal(int(bytes_so_far / elapsed))}/s"


class _ArgumentParser(argparse.ArgumentParser):
    # every failure, usage errors included, exits with status 1
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="ytmp4",
        description="Download a YouTube video as an MP4 file",
    )
    parser.add_argument("url", help="YouTube video URL")
    parser.add_argument(
        "-q",
        "--quality",
        default="highest",
        help='Video quality: "highest", "lowest", or a height such as 720 or 720p (default: highest)',
    )
    parser.add_argument(
        "-o",
        "--output",
        help='Output file name (default: "<title>.mp4")',
    )
    parser.add_argument(
        "-d",
        "--output-dir",
        help="Directory to write the file to (default: download.output_dir or the current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_source() -> YtDlpSource:
    return YtDlpSource(
        proxy=load_key(ConfigContract.K_YT_PROXY),
        cookies_path=load_key(ConfigContract.K_YT_COOKIES_PATH),
        socket_timeout=load_key(ConfigContract.K_SOCKET_TIMEOUT),
        chunk_size=load_key(ConfigContract.K_CHUNK_SIZE),
    )


def report_error(console: Console, error: DownloadError):
    console.print(f"[red]Error:[/red] {escape(error.message)}")
    suggestion = get_error_suggestion(error)
    if suggestion:
        console.print(f"[dim]{escape(suggestion)}[/dim]")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging("DEBUG" if args.verbose else None, force=True)

    console = Console()
    err_console = Console(stderr=True)

    try:
        quality = parse_quality(args.quality)
        config = DownloadConfig.from_settings()
        request = DownloadRequest(
            url=args.url.strip(),
            quality=quality,
            output_name=args.output,
            output_dir=args.output_dir,
        )
        observer = ConsoleObserver(console, config)
        try:
            result = DownloadManager(build_source(), config).download(request, observer)
            observer.complete()
        finally:
            observer.close()
    except DownloadError as e:
        log_event("debug", f"download failed: {e.category.value}", stage="cli", op="download", logger=__name__)
        report_error(err_console, e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        err_console.print("[yellow]Download cancelled[/yellow]")
        return EXIT_FAILURE
    except Exception as e:
        log_event("error", f"unexpected failure: {e!r}", stage="cli", op="download", logger=__name__)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_FAILURE

    console.print(f"[green]Downloaded to[/green] {escape(result.output_path)}", soft_wrap=True)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
