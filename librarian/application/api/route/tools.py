from typing import List, Optional
from fastapi import APIRouter, HTTPException, Request

from librarian.domain.tool.tool_executor import ToolExecutor, UnknownTool
from librarian.domain.tool.tool_registry import ToolRegistry
from ..schema.tools import ToolCallRequest, ToolCallResponse, ToolDescriptor

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("", response_model=List[ToolDescriptor])
async def list_tools(
    request: Request,
    category: Optional[str] = None,
    query: Optional[str] = None
):
    """List tool descriptors, optionally filtered by category or a search query"""

    registry: ToolRegistry = request.app.state.tool_registry

    if category:
        tools = await registry.get_tools_by_category(category)
    else:
        tools = await registry.get_available_tools()

    if query:
        matching = {tool["id"] for tool in await registry.search_tools(query)}
        tools = [tool for tool in tools if tool["id"] in matching]

    return tools


@router.post("/{tool_id}", response_model=ToolCallResponse, response_model_by_alias=True)
async def call_tool(tool_id: str, body: ToolCallRequest, request: Request):
    """Call a tool; tool failures come back as isError text with status 200"""

    executor: ToolExecutor = request.app.state.tool_executor

    try:
        result = await executor.execute_tool(tool_id, body.arguments)
    except UnknownTool as e:
        raise HTTPException(status_code=404, detail=str(e))

    return result.to_payload()
