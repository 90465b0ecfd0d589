import asyncio
import sys

import click
from flask import current_app
from flask.cli import with_appcontext

from models.generation import GenerationRequest, ValidationError
from models.platform import PLATFORM_CONFIGS, PLATFORM_ORDER
from helpers.completion import CompletionError


@click.command("generate")
@click.argument("topic")
@click.option("--platform", default="", help="LinkedIn, X, Instagram, Both or All")
@click.option("--tone", default="", help="Tone of voice, free text")
@click.option("--audience", default="", help="Target audience, free text")
@click.option(
    "--language", default="ar", type=click.Choice(["ar", "en"]), help="Output language"
)
@click.option(
    "--mode",
    default=None,
    type=click.Choice(["post", "series", "reply", "campaign", "ad"]),
    help="Strategic mode (answers with the JSON envelope)",
)
@with_appcontext
def generate_command(topic, platform, tone, audience, language, mode):
    """Generate post text for TOPIC and print each platform section."""
    payload = {
        "text": topic,
        "platform": platform,
        "tone": tone,
        "audience": audience,
        "language": language,
    }
    if mode:
        payload["mode"] = mode

    try:
        request = GenerationRequest.from_payload(payload)
    except ValidationError as e:
        raise click.UsageError(str(e))

    service = current_app.extensions["generation_service"]
    try:
        output = asyncio.run(service.generate(request))
    except CompletionError as e:
        click.echo(click.style(f"Generation failed: {e}", fg="red"), err=True)
        sys.exit(1)

    for platform_enum in PLATFORM_ORDER:
        if platform_enum not in request.platforms:
            continue
        text = output.get(platform_enum)
        name = PLATFORM_CONFIGS[platform_enum].name
        click.echo(click.style(f"== {name} ({len(text)} chars)", bold=True))
        click.echo(text)
        click.echo()
