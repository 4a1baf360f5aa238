"""Shared type definitions for tabby."""

from typing import Literal, TypeAlias

# Mode of operation
TabbyMode: TypeAlias = Literal["dev", "build"]

# Which debounce channel fired a rebuild ("direct" = not debounced)
ChannelName: TypeAlias = Literal["fast", "slow"]
PassChannel: TypeAlias = Literal["fast", "slow", "direct"]

# Scope of a render pass
RenderScope: TypeAlias = Literal["page", "site"]
