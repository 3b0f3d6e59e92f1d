"""Protocol layer: report framing, command builders, handshake, and response parsing."""

from .framing import Channel, pad_report
from .commands import Command, build_command, build_color_frames
from .timing import SpeedLevel, timing_of
from .parser import parse_status
