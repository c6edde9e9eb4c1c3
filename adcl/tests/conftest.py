"""Unit tests configuration file."""

import os

import pytest

from adcl.generator import Message, Param, build_content_type, resolve_layout
from adcl.generator.python import render
from adcl.generator.types import Schema

TESTS_DIR = os.path.dirname(os.path.realpath(__file__))


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def _make_message(command, positional=(), named=()):
    return Message(
        command=command,
        positional_params=[Param(name=n, type=t) for n, t in positional],
        named_params=[Param(name=n, type=t, token=tok) for tok, n, t in named],
    )


def direct_type(message):
    return build_content_type(resolve_layout(message))


def generated_type(message):
    gbl = globals().copy()
    exec(render(Schema(messages=[message])), gbl)
    return gbl[f"{message.command}Content"]


@pytest.fixture(params=["direct", "generated"])
def build(request):
    """Build a content type either directly or from generated code."""
    if request.param == "direct":
        return direct_type
    return generated_type


@pytest.fixture
def schema_file():
    return os.path.join(TESTS_DIR, "generator", "messages.adcl")


@pytest.fixture
def make_message():
    """Build a message from (name, type) and (token, name, type) tuples."""
    return _make_message
