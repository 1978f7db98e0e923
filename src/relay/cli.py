"""CLI entrypoint for relay."""

from __future__ import annotations

import asyncio
import logging

import httpx
import typer

from relay.config import AdapterConfig, resolve_config
from relay.env import load_dotenv
from relay.llm.client import ProviderError, create_client
from relay.llm.translate import build_messages_body
from relay.llm.types import ChatRequest, ChatResponse, ResponseModel, ToolDefinition
from relay.ui.render import render_config, render_failure, render_request_body, render_response

app = typer.Typer(add_completion=False, help="OpenAI-style chat completions over the Anthropic messages API.")
config_app = typer.Typer(add_completion=False, help="Adapter configuration helpers.")
app.add_typer(config_app, name="config")

_SAMPLE_SCHEMA = {
    "type": "object",
    "properties": {
        "elements": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "elementId": {"type": "string"},
                    "description": {"type": "string"},
                    "method": {"type": "string"},
                    "arguments": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["elementId", "description"],
            },
        }
    },
    "required": ["elements"],
}

_SAMPLE_TOOL = ToolDefinition(
    name="click",
    description="Click an element on the page.",
    parameters={
        "type": "object",
        "properties": {"selector": {"type": "string"}},
        "required": ["selector"],
    },
)


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log outgoing calls."),
) -> None:
    """Relay CLI."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@config_app.command("show")
def config_show() -> None:
    """Display the adapter configuration resolved from the environment."""
    render_config(_resolve_or_exit())


@app.command("dry-run")
def dry_run(
    structured: bool = typer.Option(False, "--structured", help="Request structured output instead of tools."),
) -> None:
    """Print the translated Anthropic request body without network access."""
    config = _resolve_or_exit()
    request = _sample_request(structured=structured)
    render_request_body(build_messages_body(request, model=config.model))


@app.command("chat")
def chat(
    prompt: str = typer.Argument(..., help="User message to send."),
    system: str | None = typer.Option(None, "--system", "-s", help="System prompt."),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum output tokens."),
    temperature: float | None = typer.Option(None, "--temperature", help="Sampling temperature."),
    mock: bool = typer.Option(False, "--mock", help="Answer offline with the mock client."),
) -> None:
    """Send a single prompt through the configured client and print the response."""
    config = _resolve_or_exit()
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    request = ChatRequest(messages=messages, max_tokens=max_tokens, temperature=temperature)

    try:
        response = asyncio.run(_send(config, request, mock=mock))
    except ProviderError as exc:
        render_failure(f"{exc}: {exc.response_text}")
        raise typer.Exit(code=1) from exc
    except httpx.HTTPError as exc:
        render_failure(f"Request to {config.base_url} failed: {exc}")
        raise typer.Exit(code=1) from exc

    render_response(response)


async def _send(config: AdapterConfig, request: ChatRequest, *, mock: bool) -> ChatResponse:
    client = create_client("mock", model=config.model) if mock else config.build_client()
    try:
        return await client.create_chat_completion(request)
    finally:
        await client.aclose()


def _resolve_or_exit() -> AdapterConfig:
    try:
        return resolve_config()
    except ValueError as exc:
        render_failure(str(exc))
        raise typer.Exit(code=1) from exc


def _sample_request(*, structured: bool) -> ChatRequest:
    messages = [
        {"role": "system", "content": "You are a browser automation assistant."},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Find the login button."},
                {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="}},
            ],
        },
    ]
    if structured:
        return ChatRequest(
            messages=messages,
            temperature=0.1,
            response_model=ResponseModel(schema=_SAMPLE_SCHEMA, name="Observation"),
        )
    return ChatRequest(messages=messages, temperature=0.1, tools=[_SAMPLE_TOOL], tool_choice="required")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
