"""
Assembly of the standalone VOD playlist.
"""

import math
from collections.abc import Sequence

from .models import OutputPlaylist, RewrittenSegment


def assemble(rewritten_segments: Sequence[RewrittenSegment], max_duration: float) -> OutputPlaylist:
    """Wrap the rewritten segments in a terminated VOD playlist.

    The target duration is the longest segment rounded up to whole seconds;
    an empty playlist gets 0.
    """
    longest = max([max_duration, *(s.duration for s in rewritten_segments)])
    return OutputPlaylist(
        segments=list(rewritten_segments),
        target_duration=math.ceil(longest) if rewritten_segments else 0,
        version=3,
        playlist_type="VOD",
        endlist=True,
    )
