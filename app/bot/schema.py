"""
BotLab v1.0 - Bot Configuration Schema
The builder's graph: intent nodes with training phrases and responses,
joined by edges. Stored as JSON on SavedBot.project_data.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.bot.matcher import Intent


class VoiceSettings(BaseModel):
    language: str = "en-US"
    voice: str = "default"
    speed: float = 1.0
    pitch: float = 0.0
    volume: float = 1.0
    enabled: bool = True


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    label: str = ""
    description: Optional[str] = None
    training_phrases: list[str] = Field(default_factory=list)
    responses: list[str] = Field(default_factory=list)
    is_default: bool = False


class BotNode(BaseModel):
    id: str
    type: Literal["intent", "response", "fallback"] = "intent"
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)

    def is_fallback(self) -> bool:
        return (
            self.type == "fallback"
            or self.data.is_default
            or self.data.label.strip().lower() == "fallback"
        )


class BotEdge(BaseModel):
    id: str
    source: str
    target: str
    animated: bool = False


class BotConfiguration(BaseModel):
    name: str
    avatar: Optional[str] = None
    personality: str = "helpful and friendly"
    description: Optional[str] = None
    voice_settings: VoiceSettings = Field(default_factory=VoiceSettings)
    nodes: list[BotNode] = Field(default_factory=list)
    edges: list[BotEdge] = Field(default_factory=list)

    def intent_nodes(self) -> list[BotNode]:
        return [n for n in self.nodes if n.type in ("intent", "fallback")]

    def intents(self) -> list[Intent]:
        """Matcher view of the graph, in node order."""
        return [
            Intent(
                name=node.data.label,
                training_phrases=list(node.data.training_phrases),
                responses=list(node.data.responses),
                is_fallback=node.is_fallback(),
                node_id=node.id,
            )
            for node in self.intent_nodes()
        ]

    def connected_intents(self, node_id: str) -> list[Intent]:
        """Intents reachable by one outgoing edge from `node_id`."""
        targets = {e.target for e in self.edges if e.source == node_id}
        return [i for i in self.intents() if i.node_id in targets]
