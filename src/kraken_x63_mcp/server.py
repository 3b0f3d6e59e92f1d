"""MCP server entry point for the NZXT Kraken X63.

Exposes tools and resources via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import HandshakeTimeout, InvalidColorCount, ReadTimeout, TransportError
from .models.color import Color
from .models.effects import Effect, color_mode_of
from .protocol.cooling import CRITICAL_TEMPERATURE, PUMP_MAX_DUTY, PUMP_MIN_DUTY
from .protocol.commands import colors_sent
from .protocol.framing import Channel
from .protocol.timing import SpeedLevel
from .session import KrakenSession

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "kraken-x63",
    instructions="MCP server for the NZXT Kraken X63 liquid cooler lighting and pump",
)

# Global session state
_session: KrakenSession | None = None


def _get_session() -> KrakenSession:
    """Get the active session, raising if not connected."""
    if _session is None or _session.closed:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _session


def _transport_failure(action: str, error: Exception) -> dict[str, Any]:
    """Error result for a failed transfer; flags a session lost with the device."""
    result: dict[str, Any] = {"error": f"{action} failed: {error}"}
    if _session is not None and _session.closed:
        result["connected"] = False
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect() -> dict[str, Any]:
    """Open a USB session with the Kraken X63 cooler.

    Auto-discovers the device by USB vendor/product ID (0x1E71:0x2007)
    and runs the initialization handshake, which also retrieves the
    firmware version.
    """
    global _session
    if _session is not None and not _session.closed:
        return {
            "connected": True,
            "message": "Already connected",
            "firmware": str(_session.firmware),
        }

    try:
        _session = KrakenSession()
    except (ConnectionError, HandshakeTimeout) as e:
        return {"connected": False, "error": str(e)}

    info = _session.connection.device_info
    return {
        "connected": True,
        "model": info.product,
        "manufacturer": info.manufacturer,
        "firmware": str(_session.firmware),
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the USB session with the cooler."""
    global _session
    if _session is None:
        return {"disconnected": True}
    _session.close()
    _session = None
    return {"disconnected": True}


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Report the device model, backend, and firmware version."""
    session = _get_session()
    info = session.connection.device_info
    return {
        "model": info.product,
        "manufacturer": info.manufacturer,
        "vendor_id": f"0x{info.vendor_id:04X}",
        "product_id": f"0x{info.product_id:04X}",
        "backend": session.connection.backend,
        "firmware": str(session.firmware),
    }


# ─── LIGHTING TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def set_color(
    channel: str,
    effect: str,
    colors: list[str] | None = None,
    speed: str = "normal",
) -> dict[str, Any]:
    """Set a lighting effect on a channel.

    Args:
        channel: external, ring, logo, or sync (all channels).
        effect: Effect name, e.g. 'fixed', 'fading', 'marquee-4', 'wings'.
        colors: Hex colors such as 'ff0000'; the count depends on the effect.
        speed: slowest, slower, normal, faster, or fastest.
    """
    try:
        target = Channel.from_name(channel)
        mode = Effect.from_name(effect)
        level = SpeedLevel.from_name(speed)
        palette = [Color.from_hex(c) for c in colors or []]
    except ValueError as e:
        return {"error": str(e)}

    session = _get_session()
    try:
        sent = session.set_color(target, mode, palette, level)
    except InvalidColorCount as e:
        return {"error": str(e), "reason": e.reason}
    except TransportError as e:
        return _transport_failure("Write", e)

    sent_colors = colors_sent(mode, palette)
    result = {
        "channel": target.name.lower(),
        "effect": mode.value,
        "colors": [c.to_hex() for c in sent_colors],
        "speed": level.name.lower(),
        "reports_sent": sent,
    }
    if len(sent_colors) < len(palette):
        result["dropped_colors"] = [c.to_hex() for c in palette[len(sent_colors):]]
    return result


# ─── COOLING TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def get_status() -> dict[str, Any]:
    """Read liquid temperature, pump speed, and pump duty."""
    session = _get_session()
    try:
        status = session.get_status()
    except ReadTimeout:
        return {"error": "No status report from device"}
    except TransportError as e:
        return _transport_failure("Read", e)
    return status.to_dict()


@mcp.tool()
def set_pump_speed(duty: int) -> dict[str, Any]:
    """Run the pump at a fixed duty.

    Args:
        duty: Pump duty in percent (20-100; lower values are raised to 20).
    """
    if not 0 <= duty <= 100:
        return {"error": "Duty must be 0-100"}

    session = _get_session()
    try:
        session.set_fixed_speed(duty)
    except TransportError as e:
        return _transport_failure("Write", e)
    return {"duty": max(duty, PUMP_MIN_DUTY)}


@mcp.tool()
def set_pump_profile(profile: list[list[int]]) -> dict[str, Any]:
    """Make the pump duty follow the liquid temperature.

    Args:
        profile: [temperature °C, duty %] pairs, e.g. [[20, 30], [40, 60], [50, 100]].
    """
    try:
        points = [(int(temp), int(duty)) for temp, duty in profile]
    except (TypeError, ValueError):
        return {"error": "Profile must be a list of [temperature, duty] pairs"}

    session = _get_session()
    try:
        session.set_speed_profile(points)
    except ValueError as e:
        return {"error": str(e)}
    except TransportError as e:
        return _transport_failure("Write", e)
    return {"profile": [list(p) for p in points]}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("kraken://device/info")
def resource_device_info() -> str:
    """Device model, firmware, connection state."""
    if _session is None or _session.closed:
        return json.dumps({"connected": False})

    info = _session.connection.device_info
    return json.dumps({
        "connected": True,
        "manufacturer": info.manufacturer,
        "product": info.product,
        "firmware": str(_session.firmware),
    })


@mcp.resource("kraken://catalog/effects")
def resource_effects_catalog() -> str:
    """All lighting effects with their accepted color counts."""
    effects = []
    for effect in Effect:
        mode = color_mode_of(effect)
        effects.append({
            "name": effect.value,
            "min_colors": mode.min_colors,
            "max_colors": mode.max_colors,
        })
    return json.dumps({"effects": effects, "count": len(effects)})


@mcp.resource("kraken://catalog/channels")
def resource_channels() -> str:
    """Lighting channels, animation speeds, and pump limits."""
    return json.dumps({
        "channels": [c.name.lower() for c in Channel],
        "speeds": [s.name.lower() for s in SpeedLevel],
        "pump": {
            "min_duty": PUMP_MIN_DUTY,
            "max_duty": PUMP_MAX_DUTY,
            "critical_temperature": CRITICAL_TEMPERATURE,
        },
    })


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
