"""Command line interface: crawl sites into a knowledge base and query it."""

import asyncio
import logging
import sys

import click

from .backends import check_backend_health
from .config import ServerConfig
from .logging_setup import configure_logging
from .rag.config import RAGConfig
from .rag.external import load_crawl_records
from .rag.indexer import DynamicSiteIndex
from .responder import ResponseGenerator, answer_query

logger = logging.getLogger(__name__)


def _load_index(knowledge_base: str, config: RAGConfig) -> DynamicSiteIndex:
    index = DynamicSiteIndex(config)
    if not index.import_knowledge_base(knowledge_base):
        raise click.ClickException(f"Could not load knowledge base from {knowledge_base}")
    return index


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: LOG_LEVEL env or INFO)")
@click.option("--env-prefix", default="", help="Prefix for environment variables")
@click.pass_context
def main(ctx, log_level, env_prefix):
    """Crawl dynamic websites and answer questions from their content."""
    server_config = ServerConfig.from_env(env_prefix)
    configure_logging(server_config, log_level)
    ctx.obj = {"server_config": server_config}


@main.command()
@click.argument("url")
@click.option("--depth", default=1, show_default=True, help="Same-domain link depth to follow")
@click.option("--output", "-o", default="knowledge_base.json", show_default=True, help="Knowledge-base file")
@click.option("--append", is_flag=True, help="Load the existing output file first and add to it")
@click.option("--max-interactions", default=5, show_default=True, help="Elements clicked per page")
@click.option("--max-tokens", default=8000, show_default=True, help="Maximum tokens per chunk")
@click.option("--headful", is_flag=True, help="Show the browser window")
@click.option("--timeout", "crawl_timeout", type=float, default=None, help="Wall-clock budget in seconds")
def crawl(url, depth, output, append, max_interactions, max_tokens, headful, crawl_timeout):
    """Crawl URL (clicking through interactive content) into a knowledge base."""
    config = RAGConfig(
        max_interactions=max_interactions,
        max_tokens=max_tokens,
        headless=not headful,
        crawl_timeout_seconds=crawl_timeout,
    )
    index = DynamicSiteIndex(config)
    if append and not index.import_knowledge_base(output):
        click.echo(f"No usable knowledge base at {output}, starting empty", err=True)

    stats = asyncio.run(index.crawl(url, depth))
    index.export_knowledge_base(output)

    click.echo(
        f"Crawled {stats.pages_crawled} pages ({stats.pages_failed} failed), "
        f"{stats.interactions_yielding}/{stats.interactions_attempted} interactions revealed content, "
        f"{len(index)} documents in {output}"
    )


@main.command()
@click.argument("records", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default="knowledge_base.json", show_default=True, help="Knowledge-base file")
@click.option("--append", is_flag=True, help="Load the existing output file first and add to it")
@click.option("--max-tokens", default=4000, show_default=True, help="Maximum tokens per chunk")
def ingest(records, output, append, max_tokens):
    """Add pages from an external crawler's JSON output to a knowledge base."""
    index = DynamicSiteIndex(RAGConfig(max_tokens=max_tokens))
    if append and not index.import_knowledge_base(output):
        click.echo(f"No usable knowledge base at {output}, starting empty", err=True)

    try:
        crawl_records = load_crawl_records(records)
    except ValueError as e:
        raise click.ClickException(str(e))

    added = asyncio.run(index.ingest_external(crawl_records))
    index.export_knowledge_base(output)
    click.echo(f"Added {added} chunks, {len(index)} documents in {output}")


@main.command()
@click.argument("knowledge_base", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@click.option("--top-k", default=5, show_default=True, help="Number of results")
@click.option(
    "--mode",
    type=click.Choice(["hybrid", "lexical", "semantic"]),
    default="hybrid",
    show_default=True,
    help="Retrieval strategy",
)
def search(knowledge_base, query, top_k, mode):
    """Search a knowledge base."""
    index = _load_index(knowledge_base, RAGConfig(show_progress=False))

    if mode == "lexical":
        documents = index.lexical_search(query, top_k)
    elif mode == "semantic":
        documents = asyncio.run(index.semantic_search(query, top_k))
    else:
        documents = asyncio.run(index.hybrid_search(query, top_k))

    if not documents:
        click.echo("No matching documents.")
        return

    for rank, doc in enumerate(documents, 1):
        preview = " ".join(doc.content.split())[:200]
        click.echo(f"[{rank}] {doc.title} <{doc.url}> ({doc.source})\n    {preview}")


@main.command()
@click.argument("knowledge_base", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@click.option("--top-k", default=3, show_default=True, help="Documents passed to the model")
@click.option("--skip-health-check", is_flag=True, help="Do not probe the LLM backend before searching")
@click.pass_context
def ask(ctx, knowledge_base, query, top_k, skip_health_check):
    """Answer QUERY from a knowledge base using the configured LLM backend."""
    server_config = ctx.obj["server_config"]

    if not skip_health_check:
        healthy, message = check_backend_health(server_config)
        if not healthy:
            raise click.ClickException(message)
        logger.info(f"[CLI] {message}")

    index = _load_index(knowledge_base, RAGConfig(show_progress=False))
    generator = ResponseGenerator(server_config)

    answer = asyncio.run(answer_query(index, generator, query, top_k))

    click.echo(answer.answer)
    if answer.sources:
        click.echo("\nSources:")
        for source in answer.sources:
            click.echo(f"  - {source['title']} <{source['url']}>")


if __name__ == "__main__":
    sys.exit(main())
