from typing import Dict, List, Any, Optional, Type, Callable, Awaitable
from pydantic import BaseModel, ConfigDict, Field
import structlog

logger = structlog.get_logger(__name__)

ToolHandler = Callable[[Any], Awaitable[str]]


class ToolConfig(BaseModel):
    """A tool exposed to agents: validated input model plus async handler"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(description="Tool id used on the transport")
    name: str = Field(description="Human readable name")
    description: str = Field(description="What the tool does, shown to agents")
    category: str = Field(default="general")
    input_model: Type[BaseModel] = Field(description="Pydantic model the arguments are validated against")
    handler: ToolHandler = Field(description="Coroutine taking the validated input, returning text")

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "inputSchema": self.input_model.model_json_schema(by_alias=True),
        }


class ToolRegistry:
    """Registry for managing available tools"""

    def __init__(self):
        self.tools: Dict[str, ToolConfig] = {}
        self.tool_categories: Dict[str, List[str]] = {}

    def register_tool(self, tool_config: ToolConfig):
        """Register a new tool"""

        tool_id = tool_config.id
        category = tool_config.category

        if tool_id in self.tools:
            raise ValueError(f"Tool already registered: {tool_id}")

        self.tools[tool_id] = tool_config

        if category not in self.tool_categories:
            self.tool_categories[category] = []
        self.tool_categories[category].append(tool_id)

        logger.debug("Tool registered", tool_id=tool_id, category=category)

    def get_tool(self, tool_id: str) -> Optional[ToolConfig]:
        return self.tools.get(tool_id)

    async def get_available_tools(self) -> List[Dict[str, Any]]:
        """Get all available tools"""

        return [tool.describe() for tool in self.tools.values()]

    async def get_tool_info(self, tool_id: str) -> Optional[Dict[str, Any]]:
        """Get information about a specific tool"""

        tool = self.tools.get(tool_id)
        return tool.describe() if tool else None

    async def get_tools_by_category(self, category: str) -> List[Dict[str, Any]]:
        """Get tools by category"""

        tool_ids = self.tool_categories.get(category, [])
        return [self.tools[tool_id].describe() for tool_id in tool_ids if tool_id in self.tools]

    async def search_tools(self, query: str) -> List[Dict[str, Any]]:
        """Search tools by id, name or description"""

        query_lower = query.lower()
        matching_tools = []

        for tool in self.tools.values():
            haystack = f"{tool.id} {tool.name} {tool.description}".lower()
            if query_lower in haystack:
                matching_tools.append(tool.describe())

        return matching_tools
