"""Media source resolution.

This package decides which file on disk represents "the media" for a given
input: plain files, directories, BDMV disc layouts and ISO images (mounted
read-only on demand). It also samples screenshot timestamps and packages
captured frames.
"""

from minfo.media.discovery import (
    VIDEO_EXTENSIONS,
    disc_root,
    find_first_iso,
    find_largest_m2ts,
    find_largest_video_file,
    find_video_candidates,
    find_video_file,
    is_iso_file,
    is_video_file,
    playback_bdmv_root,
)
from minfo.media.models import (
    MountHandle,
    ResolvedCandidates,
    ResolvedSource,
    VideoCandidate,
)
from minfo.media.mount import MountController
from minfo.media.packaging import package_files
from minfo.media.resolver import SourceResolver
from minfo.media.sampling import sample_timestamps

__all__ = [
    # discovery
    "VIDEO_EXTENSIONS",
    "disc_root",
    "find_first_iso",
    "find_largest_m2ts",
    "find_largest_video_file",
    "find_video_candidates",
    "find_video_file",
    "is_iso_file",
    "is_video_file",
    "playback_bdmv_root",
    # models
    "MountHandle",
    "ResolvedCandidates",
    "ResolvedSource",
    "VideoCandidate",
    # operations
    "MountController",
    "SourceResolver",
    "package_files",
    "sample_timestamps",
]
