from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AgentShift


class AgentShiftProvider(Protocol):
    def list_agent_ids(self) -> Sequence[int]:
        """Active agents the reminder pass should evaluate."""

        raise NotImplementedError

    def get_shift(self, agent_id: int) -> Optional[AgentShift]:
        raise NotImplementedError
