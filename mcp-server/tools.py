"""
Tool declarations and dispatch for the Gemini CLI MCP server.
Each tool maps to one gemini CLI capability.
"""

import logging

from gemini_cli import DEFAULT_MODEL, GeminiCLI

logger = logging.getLogger(__name__)

TOOLS = [
    {
        "name": "gemini_prompt",
        "description": "Send a prompt to the Gemini CLI",
        "input_schema": {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The prompt to send to Gemini"
                },
                "model": {
                    "type": ["string", "null"],
                    "description": "The model to use (optional)"
                },
                "max_tokens": {
                    "type": ["integer", "null"],
                    "minimum": 1,
                    "description": "Maximum number of tokens (optional)"
                },
                "temperature": {
                    "type": ["number", "null"],
                    "description": "Temperature for sampling (optional)"
                }
            },
            "required": ["prompt"]
        }
    },
    {
        "name": "gemini_config",
        "description": "Configure Gemini CLI settings",
        "input_schema": {
            "type": "object",
            "properties": {
                "api_key": {
                    "type": ["string", "null"],
                    "description": "API key for Gemini (optional)"
                }
            }
        }
    },
    {
        "name": "gemini_list_models",
        "description": "List the models available to the Gemini CLI",
        "input_schema": {"type": "object", "properties": {}}
    },
]

CONFIG_GUIDANCE = (
    "Gemini CLI configuration:\n"
    "- API key: Set via GOOGLE_API_KEY environment variable\n"
    f"- Model: Use --model flag (default: {DEFAULT_MODEL})"
)
API_KEY_NOTICE = "Note: Gemini API key should be set via GOOGLE_API_KEY environment variable"


async def execute_tool(name: str, inputs: dict, cli: GeminiCLI) -> str:
    """Execute a tool and return its text result.

    Errors from the gemini process (SpawnError, ExternalToolError) propagate
    so the protocol layer reports them as failed calls.
    """
    if name == "gemini_prompt":
        return await cli.prompt(
            inputs["prompt"],
            model=inputs.get("model"),
            max_tokens=inputs.get("max_tokens"),
            temperature=inputs.get("temperature"),
        )
    elif name == "gemini_config":
        return gemini_config(inputs.get("api_key"))
    elif name == "gemini_list_models":
        return await cli.list_models()

    raise ValueError(f"Unknown tool: {name}")


def gemini_config(api_key: str | None = None) -> str:
    # Configuration lives in the environment; a supplied key is never stored,
    # forwarded or logged.
    if api_key is not None:
        logger.info("gemini_config called with an API key; returning env var guidance")
        return API_KEY_NOTICE
    return CONFIG_GUIDANCE
