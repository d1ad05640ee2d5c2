#!/usr/bin/env python3
"""MCP Server for Earnings Charts.

This server exposes the synthetic earnings generator and chart engine as
MCP tools, so an assistant can configure the generator, inspect the data,
render charts to PNG files and simulate chart interaction.
"""

import os
import sys
import json
import asyncio
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tools import EarningsTools


# Create the MCP server
server = Server("earnings-charts")

# Global tools instance (initialized on first use)
tools: EarningsTools | None = None


def get_tools() -> EarningsTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # State directory can be set via EARNINGS_CHARTS_STATE_DIR env var
        default_dir = os.path.join(os.path.dirname(__file__), '..', '.state')
        state_dir = os.environ.get('EARNINGS_CHARTS_STATE_DIR', default_dir)
        tools = EarningsTools(state_dir)
    return tools


# Common chart kind parameter schema
KIND_PARAM = {
    "type": "string",
    "enum": ["allTime", "month", "daily", "statisticsEarnings", "statisticsTransactions"],
    "description": "Which chart to use: allTime, month, daily, statisticsEarnings or statisticsTransactions."
}

SIZE_PARAMS = {
    "width": {
        "type": "integer",
        "description": "Surface width in pixels (default 600)"
    },
    "height": {
        "type": "integer",
        "description": "Surface height in pixels (default 240)"
    },
}

NAME_PARAM = {
    "type": "string",
    "description": "Preset name"
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available earnings chart tools."""
    return [
        Tool(
            name="apply_config",
            description="Apply a generator configuration (periodCounts {months, pending, complete}, minBalance, minPending, enabled, grossTotal, calendarDay). Reuses the cached dataset when it is still valid, otherwise regenerates.",
            inputSchema={
                "type": "object",
                "properties": {
                    "config": {
                        "type": "object",
                        "description": "Configuration object with camelCase keys"
                    }
                },
                "required": ["config"]
            }
        ),
        Tool(
            name="get_dataset_summary",
            description="Get totals, growth pattern, seed, cache key and per-category totals of the current dataset.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_period",
            description="Get net, gross, transaction count and category split for one month.",
            inputSchema={
                "type": "object",
                "properties": {
                    "year": {
                        "type": "integer",
                        "description": "Calendar year"
                    },
                    "month": {
                        "type": "integer",
                        "description": "Month number (1-12)"
                    }
                },
                "required": ["year", "month"]
            }
        ),
        Tool(
            name="regenerate",
            description="Discard the current dataset and generate a new one for the current configuration.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="override_gross",
            description="Regenerate every month from a manually entered all-time gross amount (net is 80% of gross).",
            inputSchema={
                "type": "object",
                "properties": {
                    "gross": {
                        "type": "number",
                        "description": "All-time gross amount"
                    },
                    "pin_oldest": {
                        "type": "boolean",
                        "description": "Keep the current oldest month as the start of the timeline (default true)"
                    }
                },
                "required": ["gross"]
            }
        ),
        Tool(
            name="render_chart",
            description="Render a chart to a PNG file and return its path, the line paint order and the x-axis labels.",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": KIND_PARAM,
                    **SIZE_PARAMS,
                    "output_path": {
                        "type": "string",
                        "description": "Optional: file to write; defaults to <kind>.png in the state directory"
                    }
                },
                "required": ["kind"]
            }
        ),
        Tool(
            name="select_category",
            description="Highlight a category (subscriptions, tips, posts, messages, referrals, streams) on every rendered category chart.",
            inputSchema={
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "description": "Category name"
                    }
                },
                "required": ["category"]
            }
        ),
        Tool(
            name="pointer_move",
            description="Simulate the pointer at (x, y) on a chart and return the resulting tooltip state.",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": KIND_PARAM,
                    "x": {"type": "number", "description": "Pointer x in pixels"},
                    "y": {"type": "number", "description": "Pointer y in pixels"},
                    **SIZE_PARAMS,
                },
                "required": ["kind", "x", "y"]
            }
        ),
        Tool(
            name="list_presets",
            description="List saved presets and the active one.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="save_preset",
            description="Save the current configuration and dataset under a name.",
            inputSchema={
                "type": "object",
                "properties": {"name": NAME_PARAM},
                "required": ["name"]
            }
        ),
        Tool(
            name="load_preset",
            description="Load a saved preset; its dataset is reused when it is still valid for today.",
            inputSchema={
                "type": "object",
                "properties": {"name": NAME_PARAM},
                "required": ["name"]
            }
        ),
        Tool(
            name="delete_preset",
            description="Delete a saved preset.",
            inputSchema={
                "type": "object",
                "properties": {"name": NAME_PARAM},
                "required": ["name"]
            }
        ),
        Tool(
            name="get_transactions",
            description="Get the generated transaction list (pending and complete), newest first.",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "integer",
                        "description": "Optional: maximum number of rows to return"
                    }
                },
                "required": []
            }
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        ec_tools = get_tools()

        if name == "apply_config":
            result = ec_tools.apply_config(arguments["config"])
        elif name == "get_dataset_summary":
            result = ec_tools.get_dataset_summary()
        elif name == "get_period":
            result = ec_tools.get_period(arguments["year"], arguments["month"])
        elif name == "regenerate":
            result = ec_tools.regenerate()
        elif name == "override_gross":
            result = ec_tools.override_gross(arguments["gross"], arguments.get("pin_oldest", True))
        elif name == "render_chart":
            result = ec_tools.render_chart(
                arguments["kind"],
                arguments.get("width", 600),
                arguments.get("height", 240),
                arguments.get("output_path")
            )
        elif name == "select_category":
            result = ec_tools.select_category(arguments["category"])
        elif name == "pointer_move":
            result = ec_tools.pointer_move(
                arguments["kind"],
                arguments["x"],
                arguments["y"],
                arguments.get("width", 600),
                arguments.get("height", 240)
            )
        elif name == "list_presets":
            result = ec_tools.list_presets()
        elif name == "save_preset":
            result = ec_tools.save_preset(arguments["name"])
        elif name == "load_preset":
            result = ec_tools.load_preset(arguments["name"])
        elif name == "delete_preset":
            result = ec_tools.delete_preset(arguments["name"])
        elif name == "get_transactions":
            result = ec_tools.get_transactions(arguments.get("limit"))
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
