"""Tests for the MCP server module."""

import os
import sys
import json
import pytest
from unittest.mock import patch

# Add src and mcp-server to path for imports BEFORE importing mcp modules
MCP_SERVER_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server'))
SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src'))

if MCP_SERVER_PATH not in sys.path:
    sys.path.insert(0, MCP_SERVER_PATH)
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from mcp.types import Tool, TextContent

# Import server module - need to import from the mcp-server directory
import importlib.util
server_spec = importlib.util.spec_from_file_location("mcp_server", os.path.join(MCP_SERVER_PATH, "server.py"))
mcp_server = importlib.util.module_from_spec(server_spec)
server_spec.loader.exec_module(mcp_server)

tools_spec = importlib.util.spec_from_file_location("tools", os.path.join(MCP_SERVER_PATH, "tools.py"))
tools_module = importlib.util.module_from_spec(tools_spec)
tools_spec.loader.exec_module(tools_module)
EarningsTools = tools_module.EarningsTools


CONFIG = {
    'periodCounts': {'months': 6, 'pending': 2, 'complete': 10},
    'minBalance': 100,
    'calendarDay': '2026-03-15',
}


class TestServerConfiguration:
    """Tests for server configuration and setup."""

    def test_server_name(self):
        """Test that server has correct name."""
        assert mcp_server.server.name == "earnings-charts"

    def test_kind_param_schema(self):
        """Test that KIND_PARAM lists every chart kind."""
        assert mcp_server.KIND_PARAM['type'] == 'string'
        assert set(mcp_server.KIND_PARAM['enum']) == {
            'allTime', 'month', 'daily', 'statisticsEarnings', 'statisticsTransactions'
        }


class TestGetTools:
    """Tests for get_tools function."""

    def setup_method(self):
        """Reset global tools before each test."""
        mcp_server.tools = None

    def teardown_method(self):
        """Reset global tools after each test."""
        mcp_server.tools = None

    def test_get_tools_uses_state_dir_env(self, state_dir):
        """Test that EARNINGS_CHARTS_STATE_DIR sets the state directory."""
        with patch.dict(os.environ, {'EARNINGS_CHARTS_STATE_DIR': state_dir}):
            tools = mcp_server.get_tools()
        # Check by class name since we're using dynamic imports
        assert tools.__class__.__name__ == 'EarningsTools'
        assert tools.state_dir == state_dir

    def test_get_tools_returns_cached_instance(self, state_dir):
        """Test that get_tools returns the same instance on subsequent calls."""
        with patch.dict(os.environ, {'EARNINGS_CHARTS_STATE_DIR': state_dir}):
            tools1 = mcp_server.get_tools()
            tools2 = mcp_server.get_tools()
        assert tools1 is tools2


class TestListTools:
    """Tests for list_tools function."""

    @pytest.mark.asyncio
    async def test_list_tools_contains_expected_tools(self):
        """Test that list_tools contains all expected tool names."""
        tools = await mcp_server.list_tools()
        assert all(isinstance(t, Tool) for t in tools)
        tool_names = [t.name for t in tools]

        expected_tools = [
            'apply_config',
            'get_dataset_summary',
            'get_period',
            'regenerate',
            'override_gross',
            'render_chart',
            'select_category',
            'pointer_move',
            'list_presets',
            'save_preset',
            'load_preset',
            'delete_preset',
            'get_transactions',
        ]
        assert sorted(tool_names) == sorted(expected_tools)

    @pytest.mark.asyncio
    async def test_tools_have_object_schemas(self):
        """Test that all tools have descriptions and object input schemas."""
        for tool in await mcp_server.list_tools():
            assert tool.description
            assert tool.inputSchema['type'] == 'object'

    @pytest.mark.asyncio
    async def test_pointer_move_requires_position(self):
        tools = await mcp_server.list_tools()
        pointer = next(t for t in tools if t.name == 'pointer_move')
        assert pointer.inputSchema['required'] == ['kind', 'x', 'y']


class TestCallTool:
    """Tests for call_tool function."""

    @pytest.fixture(autouse=True)
    def tools(self, state_dir):
        mcp_server.tools = EarningsTools(state_dir)
        yield mcp_server.tools
        mcp_server.tools = None

    @pytest.mark.asyncio
    async def test_call_apply_config(self):
        result = await mcp_server.call_tool('apply_config', {'config': CONFIG})

        assert isinstance(result, list)
        assert len(result) == 1
        assert isinstance(result[0], TextContent)
        data = json.loads(result[0].text)
        assert data['periods'] == 6

    @pytest.mark.asyncio
    async def test_call_get_period(self):
        await mcp_server.call_tool('apply_config', {'config': CONFIG})
        result = await mcp_server.call_tool('get_period', {'year': 2026, 'month': 3})
        data = json.loads(result[0].text)
        assert data['month'] == 3

    @pytest.mark.asyncio
    async def test_call_render_chart(self, state_dir):
        await mcp_server.call_tool('apply_config', {'config': CONFIG})
        result = await mcp_server.call_tool('render_chart', {'kind': 'statisticsEarnings', 'width': 300})
        data = json.loads(result[0].text)
        assert data['width'] == 300
        assert os.path.exists(data['path'])

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self):
        result = await mcp_server.call_tool('unknown_tool', {})
        data = json.loads(result[0].text)
        assert 'error' in data

    @pytest.mark.asyncio
    async def test_call_tool_with_exception(self):
        """Errors raised by a tool are returned as JSON."""
        result = await mcp_server.call_tool('load_preset', {'name': 'missing'})
        data = json.loads(result[0].text)
        assert 'missing' in data['error']

    @pytest.mark.asyncio
    async def test_call_tool_with_missing_argument(self):
        result = await mcp_server.call_tool('get_period', {'year': 2026})
        data = json.loads(result[0].text)
        assert 'error' in data
