"""Tests for RunContext stages and execution."""

from unittest.mock import AsyncMock

import pytest

from gauntlet.exceptions import CommandNotResolvedError
from gauntlet.plugin import Command, Plugin
from gauntlet.run_context import RunContext, RunStage


def test_new_context_is_created_stage():
    ctx = RunContext("generate Model", {"quiet": True})
    assert ctx.stage is RunStage.CREATED
    assert ctx.full_arguments == "generate Model"
    assert ctx.options == {"quiet": True}
    assert ctx.plugin is None
    assert ctx.command is None
    assert ctx.arguments is None
    assert ctx.string_arguments is None


def test_stage_follows_resolution():
    ctx = RunContext()
    ctx.plugin = Plugin(namespace="app")
    assert ctx.stage is RunStage.PLUGIN_RESOLVED
    ctx.command = Command(name="generate")
    assert ctx.stage is RunStage.COMMAND_RESOLVED


@pytest.mark.asyncio
async def test_run_without_command_raises():
    ctx = RunContext()
    ctx.plugin = Plugin(namespace="app")
    with pytest.raises(CommandNotResolvedError):
        await ctx.run()
    assert ctx.stage is RunStage.PLUGIN_RESOLVED


@pytest.mark.asyncio
async def test_run_marks_executed():
    handler = AsyncMock()
    ctx = RunContext()
    ctx.plugin = Plugin(namespace="app")
    ctx.command = Command(name="generate", handler=handler)

    await ctx.run()

    handler.assert_awaited_once_with(ctx)
    assert ctx.stage is RunStage.EXECUTED


@pytest.mark.asyncio
async def test_run_without_handler_still_executes():
    ctx = RunContext()
    ctx.plugin = Plugin(namespace="app")
    ctx.command = Command(name="noop")
    await ctx.run()
    assert ctx.stage is RunStage.EXECUTED


@pytest.mark.asyncio
async def test_failed_handler_leaves_command_resolved():
    ctx = RunContext()
    ctx.plugin = Plugin(namespace="app")
    ctx.command = Command(name="boom", handler=AsyncMock(side_effect=ValueError("x")))

    with pytest.raises(ValueError):
        await ctx.run()

    assert ctx.stage is RunStage.COMMAND_RESOLVED
