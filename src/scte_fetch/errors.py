"""
Error kinds raised by the fetch pipeline.

Every kind aborts the run; nothing is retried and partially written files
are left on disk. ``exit_code`` is what the CLI exits with.
"""


class ScteFetchError(RuntimeError):
    """Base class for all pipeline errors."""

    exit_code = 1


class InvalidInputUrl(ScteFetchError):
    """The manifest URL given on the command line is not an absolute URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f'Invalid manifest URL: "{url}"')
        self.url = url


class OutdirCreationFailed(ScteFetchError):
    """The output directory could not be created."""

    def __init__(self, outdir: str, reason: str = "") -> None:
        msg = f'Unable to create outdir: "{outdir}"'
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
        self.outdir = outdir


class NoCueSegmentsFound(ScteFetchError):
    """The playlist carries no SCTE-35 cue metadata. Not a failure."""

    exit_code = 0

    def __init__(self) -> None:
        super().__init__("No SCTE segment was found")


class PlaylistParseError(ScteFetchError):
    """The source text is not a segment-based HLS media playlist."""


class InvalidUri(ScteFetchError):
    """A segment or key URI could not be resolved to a local filename."""

    def __init__(self, uri: str, reason: str = "malformed URI") -> None:
        super().__init__(f'Invalid URI "{uri}": {reason}')
        self.uri = uri


class FetchFailed(ScteFetchError):
    """A byte fetch did not succeed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class KeyFetchFailed(FetchFailed):
    """A decryption key could not be fetched."""


class WriteFailed(ScteFetchError):
    """A fetched file could not be written to the output directory."""

    def __init__(self, path: str, uri: str, reason: str) -> None:
        super().__init__(f"Failed to write {path} (from {uri}): {reason}")
        self.path = path
        self.uri = uri


class ConcatenationFailed(ScteFetchError):
    """ffmpeg exited non-zero while concatenating the local playlist."""
