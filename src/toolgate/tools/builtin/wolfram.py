"""Wolfram Alpha computational queries.

Auth: WOLFRAM_APP_ID, passed in by the loader at construction time.
"""

from __future__ import annotations

import logging

import httpx

from toolgate.tools.base import FunctionTool, Tool, ToolParam, ToolResult

logger = logging.getLogger(__name__)

WOLFRAM_API = "https://api.wolframalpha.com/v1/result"
APP_ID_FIELD = "WOLFRAM_APP_ID"


class WolframAlphaTool(Tool):
    """Query Wolfram Alpha for mathematical, scientific, and computational answers."""

    name = "wolfram"
    description = (
        "Query Wolfram Alpha for mathematical computations, unit conversions, "
        "scientific facts, and complex calculations. Examples: '15% of 3200', "
        "'integral of x^2', 'distance from Mumbai to Delhi'."
    )
    status_text = "Computing with Wolfram Alpha..."
    parameters = [
        ToolParam(
            name="query",
            type="string",
            description="The mathematical, scientific, or computational query",
            required=True,
        ),
    ]

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None, **kwargs):
        app_id = kwargs.pop(APP_ID_FIELD, None)
        if not app_id:
            raise ValueError(f"Missing {APP_ID_FIELD}")
        super().__init__(**kwargs)
        self.app_id = app_id
        self._transport = transport

    async def execute(self, query: str, **_) -> ToolResult:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(
                    WOLFRAM_API,
                    params={"input": query, "appid": self.app_id},
                    timeout=15,
                )

                if resp.status_code == 501:
                    return ToolResult.fail(
                        f"Wolfram Alpha couldn't compute an answer for: '{query}'. "
                        "Try rephrasing the query more precisely."
                    )

                resp.raise_for_status()
                answer = resp.text.strip()

            if not answer:
                return ToolResult.fail(f"Wolfram Alpha returned no answer for: {query}")

            return ToolResult.success(answer, query=query, answer=answer)

        except httpx.HTTPStatusError as e:
            logger.error(f"Wolfram Alpha HTTP error: {e.response.status_code}")
            return ToolResult.fail(f"Wolfram Alpha error: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Wolfram Alpha request failed: {e}")
            return ToolResult.fail(f"Wolfram Alpha query failed: {e}")


def wolfram_function(**kwargs) -> FunctionTool:
    """Function-calling variant: the same tool behind a FunctionTool adapter."""
    return FunctionTool(WolframAlphaTool(**kwargs))
