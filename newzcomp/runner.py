"""
Pipeline orchestration for news bias comparison.

For every seed URL the pipeline runs:
1. Allow-list check on the seed domain
2. Article metadata extraction
3. Concept extraction and query building
4. Search and related-article discovery (section resolution, one outlet per domain)
5. Full-text scraping
6. Bias analysis
7. Record assembly

Batch runs discover seed URLs per theme, process them sequentially or on a
bounded worker pool, write a raw audit file per theme and persist only the
records that pass the validation gate.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
from dataclasses import dataclass, field
from datetime import date
import logging
from pathlib import Path
import threading
import uuid

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .analyzers.bias import Analyzer, BiasAnalyzer
from .analyzers.concepts import ConceptExtractor, ConceptSource
from .analyzers.relevance import RelevanceSelector
from .config import AppConfig
from .core.allowlist import DomainAllowList, domain_of, load_allowlist
from .core.types import PipelineRecord, SeedArticle, SeedResult
from .core.validation import filter_allowed_related, validate_record
from .errors import ProviderError
from .fetch.article_info import get_article_info
from .fetch.scraper import scrape_articles
from .llm.providers import create_provider
from .llm.tracing import set_span_output, setup_langfuse, start_span
from .output.store import JsonlRecordStore, RecordStore, write_theme_audit
from .search.google import GoogleSearchProvider, SearchProvider
from .search.query import build_query
from .search.related import collect_related_articles, prepend_seed
from .search.sections import SectionResolver
from .search.themes import canonical_theme, discover_seed_urls, is_breaking_theme
from .utils.logging import log_event, log_context, setup_llm_logger, setup_logging


NO_RELATED = "No related articles found"
NO_SCRAPED = "No articles scraped"

SAVED = "saved"
REJECTED = "rejected"
SAVE_FAILED = "save_failed"


@dataclass
class PipelineContext:
    """Collaborators shared by every seed URL of a run.

    All members are read-only during a run, so one context can be used
    from several worker threads.
    """

    cfg: AppConfig
    allowlist: DomainAllowList
    search: SearchProvider
    concepts: ConceptSource
    resolver: SectionResolver
    analyzer: Analyzer
    store: RecordStore
    batch_id: str
    logger: logging.Logger
    news_date: str = field(default_factory=lambda: date.today().isoformat())


@dataclass
class ThemeReport:
    theme: str
    total: int = 0
    valid: int = 0
    errors: int = 0
    rejected: int = 0
    audit_path: Path | None = None
    results: list[SeedResult] = field(default_factory=list)


@dataclass
class BatchReport:
    batch_id: str
    output_dir: Path
    themes: list[ThemeReport] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return sum(report.total for report in self.themes)

    @property
    def valid(self) -> int:
        return sum(report.valid for report in self.themes)


def build_context(
    cfg: AppConfig,
    allowlist: DomainAllowList,
    store: RecordStore,
    batch_id: str,
    logger: logging.Logger,
    llm_logger: logging.Logger | None = None,
) -> PipelineContext:
    """Wire the model-backed analyzers and search adapter for a run."""
    provider = create_provider(cfg.provider, cfg.logging, llm_logger)
    selector = RelevanceSelector(cfg, provider, logger)
    return PipelineContext(
        cfg=cfg,
        allowlist=allowlist,
        search=GoogleSearchProvider(cfg.search, cfg.fetch),
        concepts=ConceptExtractor(cfg, provider, logger),
        resolver=SectionResolver(cfg.fetch, cfg.section, selector),
        analyzer=BiasAnalyzer(cfg, provider, logger),
        store=store,
        batch_id=batch_id,
        logger=logger,
    )


def analyze_seed_url(url: str, ctx: PipelineContext, theme: str = "All") -> SeedResult:
    """Run the full pipeline for one seed URL.

    Never raises: every failure becomes a SeedResult carrying an error.
    """
    with log_context(url=url, theme=theme):
        with start_span("newzcomp.seed", kind="chain", input_value={"url": url, "theme": theme}) as span:
            try:
                result = _analyze_seed_url(url, ctx, theme)
            except Exception as exc:  # noqa: BLE001
                ctx.logger.exception("Unexpected failure for %s", url)
                result = SeedResult(url=url, error=f"{type(exc).__name__}: {exc}")
            set_span_output(span, {"ok": result.ok, "error": result.error})
        if result.error:
            log_event(ctx.logger, "Seed failed", level=logging.WARNING, event="seed_failed", error=result.error)
    return result


def _analyze_seed_url(url: str, ctx: PipelineContext, theme: str) -> SeedResult:
    cfg = ctx.cfg
    logger = ctx.logger
    log_event(logger, "Seed start", event="seed_start")

    domain = domain_of(url)
    if not ctx.allowlist.is_allowed(domain):
        return SeedResult(url=url, error=f"Domain not allowed for analysis: {domain}")

    seed = SeedArticle.from_info(url, get_article_info(url, cfg.fetch))
    params = build_query(seed, ctx.concepts, cfg.search)
    candidates = ctx.search.search(
        params.query,
        date_restrict=params.date_restrict,
        sort=params.sort,
        num=cfg.search.num_results,
    )
    related = collect_related_articles(
        url,
        candidates,
        params.query,
        ctx.allowlist,
        ctx.resolver,
        cfg.fetch,
        cap=cfg.search.max_related,
    )
    if not related:
        return SeedResult(url=url, error=NO_RELATED)

    related = prepend_seed(related, seed)
    scraped = scrape_articles(related, cfg.fetch, cfg.scrape)
    usable = sum(1 for article in scraped if article.has_text)
    log_event(logger, "Scrape complete", event="scrape_complete", scraped=len(scraped), with_text=usable)
    if not usable:
        return SeedResult(url=url, error=NO_SCRAPED)

    try:
        analysis, error = ctx.analyzer.analyze(scraped)
    except ProviderError as exc:
        return SeedResult(url=url, error=f"Analysis failed: {exc}")
    if analysis is None:
        error = error or {"error": "Unparseable response"}
        return SeedResult(url=url, error=f"Analysis failed: {error['error']}", raw_response=error.get("raw"))

    record = PipelineRecord(
        url=url,
        title=seed.title,
        summary=analysis.summary,
        analysis=analysis,
        related_articles=filter_allowed_related(related, ctx.allowlist),
        keywords=params.query,
        image_url=seed.image_url,
        author=seed.author,
        source=domain,
        topic=analysis.topic,
        theme=theme,
        news_date=ctx.news_date,
        batchid=ctx.batch_id,
        is_breaking=is_breaking_theme(theme),
    )
    return SeedResult(url=url, record=record)


def persist_if_valid(result: SeedResult, ctx: PipelineContext) -> str:
    """Save a successful result when it passes the validation gate.

    Returns one of SAVED, REJECTED or SAVE_FAILED. A failing store is
    logged and reported, never raised.
    """
    if result.record is None:
        return REJECTED
    with log_context(url=result.url):
        reasons = validate_record(result.record, ctx.allowlist, ctx.cfg.validation)
        if reasons:
            log_event(ctx.logger, "Record rejected", level=logging.WARNING, event="record_rejected", reasons=reasons)
            return REJECTED
        try:
            ctx.store.save(result.record, ctx.batch_id)
        except Exception as exc:  # noqa: BLE001
            log_event(
                ctx.logger,
                "Record save failed",
                level=logging.ERROR,
                event="record_save_failed",
                error=f"{type(exc).__name__}: {exc}",
            )
            return SAVE_FAILED
        log_event(ctx.logger, "Record saved", event="record_saved")
    return SAVED


def run_theme(
    theme: str,
    ctx: PipelineContext,
    batch_dir: Path,
    seed_urls: list[str] | None = None,
    cancel: threading.Event | None = None,
    progress: Progress | None = None,
    task_id: int | None = None,
) -> ThemeReport:
    """Analyze every seed URL of a theme and persist the valid records.

    Args:
        theme: Theme name; unknown names fall back to "All"
        ctx: Shared run collaborators
        batch_dir: Directory receiving the raw audit file
        seed_urls: Seed URLs to use instead of discovering them by search
        cancel: Checked before each seed URL starts
        progress: Optional Rich progress bar
        task_id: Task ID for progress updates
    """
    theme = canonical_theme(theme)
    cfg = ctx.cfg
    with log_context(theme=theme), start_span("newzcomp.theme", kind="chain", input_value={"theme": theme}) as span:
        if seed_urls is None:
            seed_urls = discover_seed_urls(
                theme,
                ctx.search,
                cfg.fetch,
                limit=cfg.run.max_seeds_per_theme,
            )
        if progress and task_id is not None:
            progress.update(task_id, total=len(seed_urls))

        report = ThemeReport(theme=theme)

        def _on_result(result: SeedResult) -> None:
            report.results.append(result)
            if result.error:
                report.errors += 1
            else:
                outcome = persist_if_valid(result, ctx)
                if outcome == SAVED:
                    report.valid += 1
                elif outcome == SAVE_FAILED:
                    report.errors += 1
                else:
                    report.rejected += 1
            if progress and task_id is not None:
                progress.advance(task_id, 1)

        try:
            _process_seeds(seed_urls, ctx, theme, cancel, _on_result)
        finally:
            # Keep the audit file in seed order regardless of completion order.
            order = {url: idx for idx, url in enumerate(seed_urls)}
            report.results.sort(key=lambda result: order.get(result.url, len(order)))
            report.total = len(report.results)
            report.audit_path = write_theme_audit(report.results, batch_dir, theme, cfg.output.audit_prefix)

        log_event(
            ctx.logger,
            "Theme complete",
            event="theme_complete",
            total=report.total,
            valid=report.valid,
            errors=report.errors,
            rejected=report.rejected,
            audit=str(report.audit_path),
        )
        set_span_output(span, {"total": report.total, "valid": report.valid})
    return report


def _process_seeds(
    seed_urls: list[str],
    ctx: PipelineContext,
    theme: str,
    cancel: threading.Event | None,
    on_result,
) -> None:
    concurrency = max(1, int(ctx.cfg.run.concurrency))

    def _cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    if concurrency == 1:
        for url in seed_urls:
            if _cancelled():
                log_event(ctx.logger, "Run cancelled", level=logging.WARNING, event="run_cancelled")
                return
            on_result(analyze_seed_url(url, ctx, theme))
        return

    log_event(ctx.logger, "Seed concurrency enabled", event="seed_concurrency_enabled", workers=concurrency)

    def _guarded(url: str) -> SeedResult | None:
        if _cancelled():
            return None
        return analyze_seed_url(url, ctx, theme)

    with ThreadPoolExecutor(max_workers=concurrency) as executor:
        futures = []
        for url in seed_urls:
            # Copy current context (including tracing ids) into worker thread.
            run_ctx = copy_context()
            futures.append(executor.submit(run_ctx.run, _guarded, url))
        for future in as_completed(futures):
            result = future.result()
            if result is not None:
                on_result(result)

    if _cancelled():
        log_event(ctx.logger, "Run cancelled", level=logging.WARNING, event="run_cancelled")


def run_batch(
    themes: list[str],
    cfg: AppConfig,
    output_dir: Path,
    cancel: threading.Event | None = None,
    show_progress: bool = True,
    console: Console | None = None,
    context_factory=build_context,
) -> BatchReport:
    """Run every theme under one batch id.

    Raises:
        AllowlistError: If the allow-list cannot be loaded
    """
    allowlist = load_allowlist(cfg.allowlist.path)
    batch_id = str(uuid.uuid4())
    batch_dir = output_dir / batch_id
    batch_dir.mkdir(parents=True, exist_ok=True)

    logger = setup_logging(cfg.logging, batch_dir)
    llm_logger = setup_llm_logger(cfg.logging, batch_dir)
    setup_langfuse(cfg.langfuse)

    store = JsonlRecordStore(output_dir, cfg.output.records_file)
    ctx = context_factory(cfg, allowlist, store, batch_id, logger, llm_logger)
    batch = BatchReport(batch_id=batch_id, output_dir=batch_dir)

    with log_context(batch_id=batch_id):
        log_event(
            logger,
            "Batch start",
            event="batch_start",
            themes=themes,
            allowed_domains=len(allowlist),
            output=str(batch_dir),
        )
        _run_themes(themes, ctx, batch, cancel, show_progress, console)
        log_event(
            logger,
            "Batch complete",
            event="batch_complete",
            total=batch.total,
            valid=batch.valid,
            cancelled=batch.cancelled,
        )
    return batch


def _run_themes(
    themes: list[str],
    ctx: PipelineContext,
    batch: BatchReport,
    cancel: threading.Event | None,
    show_progress: bool,
    console: Console | None,
) -> None:
    with start_span("newzcomp.batch", kind="chain", input_value={"themes": themes}) as span:
        if show_progress:
            console = console or Console()
            progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeRemainingColumn(),
                console=console,
            )
            with progress:
                for theme in themes:
                    if cancel is not None and cancel.is_set():
                        break
                    task_id = progress.add_task(canonical_theme(theme), total=None)
                    batch.themes.append(
                        run_theme(theme, ctx, batch.output_dir, cancel=cancel, progress=progress, task_id=task_id)
                    )
        else:
            for theme in themes:
                if cancel is not None and cancel.is_set():
                    break
                batch.themes.append(run_theme(theme, ctx, batch.output_dir, cancel=cancel))

        if cancel is not None and cancel.is_set():
            batch.cancelled = True
        set_span_output(span, {"total": batch.total, "valid": batch.valid})


def analyze_single(
    url: str,
    cfg: AppConfig,
    output_dir: Path,
    context_factory=build_context,
) -> tuple[SeedResult, bool]:
    """Analyze one URL outside a theme run.

    Returns the result and whether the record was persisted.

    Raises:
        AllowlistError: If the allow-list cannot be loaded
    """
    allowlist = load_allowlist(cfg.allowlist.path)
    batch_id = str(uuid.uuid4())
    batch_dir = output_dir / batch_id
    logger = setup_logging(cfg.logging, batch_dir)
    llm_logger = setup_llm_logger(cfg.logging, batch_dir)
    setup_langfuse(cfg.langfuse)

    store = JsonlRecordStore(output_dir, cfg.output.records_file)
    ctx = context_factory(cfg, allowlist, store, batch_id, logger, llm_logger)
    with log_context(batch_id=batch_id):
        result = analyze_seed_url(url, ctx, "All")
        saved = persist_if_valid(result, ctx) == SAVED
    return result, saved
