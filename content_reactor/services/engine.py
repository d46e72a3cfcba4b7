"""Assemble the reaction engine from settings and collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import requests

from .. import logging_manager as log_mgr
from ..config_manager import ReactorSettings, get_settings
from ..locales import LocaleTable
from ..records.media import LocalMediaStore, MediaStore
from ..records.store import InMemoryRecordStore, RecordStore
from ..records.types import MutationAction, MutationEvent
from .citations import BibliographicResolver, CitationOrchestrator
from .citations.clients import CrossRefClient, PageDoiScanner, ZoteroClient
from .covers import CoverOrchestrator, PdfRenderer, PyMuPdfRenderer
from .dispatcher import ReactionDispatcher
from .guard import ContentFingerprints, InMemoryOperationGuard, OperationGuard
from .scheduler import ReactionScheduler
from .slugs import SlugReconciler
from .translation import TranslationOrchestrator
from .translation_providers import Translator, create_translator

logger = log_mgr.get_logger().getChild("services.engine")


@dataclass
class ReactionEngine:
    """One process-wide set of reaction pipelines sharing guard state."""

    settings: ReactorSettings
    store: RecordStore
    media_store: MediaStore
    translator: Translator
    renderer: PdfRenderer
    resolver: BibliographicResolver
    guard: OperationGuard
    fingerprints: ContentFingerprints
    scheduler: ReactionScheduler
    dispatcher: ReactionDispatcher
    translation: TranslationOrchestrator
    covers: CoverOrchestrator
    citations: CitationOrchestrator
    slugs: SlugReconciler
    session: Optional[requests.Session] = None
    _detach: List[Callable[[], None]] = field(default_factory=list, repr=False)

    def attach(self, store: Optional[InMemoryRecordStore] = None) -> None:
        """Subscribe the dispatcher to mutation events of ``store``."""

        target = store if store is not None else self.store
        subscribe = getattr(target, "subscribe", None)
        if subscribe is None:
            raise TypeError(f"{type(target).__name__} does not publish mutation events")

        def _listener(event: MutationEvent) -> None:
            if event.action == MutationAction.CREATE:
                self.dispatcher.handle_create(event)
            else:
                self.dispatcher.handle_update(event)

        subscribe(_listener)
        self._detach.append(lambda: target.unsubscribe(_listener))

    def detach(self) -> None:
        while self._detach:
            self._detach.pop()()

    async def drain(self) -> None:
        await self.scheduler.drain()

    async def aclose(self) -> None:
        """Finish pending reactions and release HTTP sessions."""

        await self.scheduler.drain()
        self.detach()
        self.translator.close()
        self.resolver.close()
        if self.session is not None:
            self.session.close()
        logger.info("Reaction engine closed", extra={"event": "engine.closed"})


def build_engine(settings: Optional[ReactorSettings] = None, **overrides: Any) -> ReactionEngine:
    """Wire a :class:`ReactionEngine` from ``settings``.

    Keyword overrides replace individual collaborators: ``store``,
    ``media_store``, ``translator``, ``renderer``, ``resolver``, ``guard``,
    ``fingerprints``, ``scheduler``, ``session``.
    """

    settings = settings or get_settings()
    unknown = set(overrides) - {
        "store",
        "media_store",
        "translator",
        "renderer",
        "resolver",
        "guard",
        "fingerprints",
        "scheduler",
        "session",
    }
    if unknown:
        raise TypeError(f"Unknown engine overrides: {', '.join(sorted(unknown))}")
    if settings.debug:
        log_mgr.configure_logging_level(debug_enabled=True)

    session = overrides.get("session")
    store = overrides.get("store") or InMemoryRecordStore()
    media_store = overrides.get("media_store") or LocalMediaStore(
        settings.resolve_path(settings.media_dir)
    )
    translator = overrides.get("translator") or create_translator(settings, session=session)
    renderer = overrides.get("renderer") or PyMuPdfRenderer()
    resolver = overrides.get("resolver") or BibliographicResolver(
        crossref=CrossRefClient(
            mailto=settings.crossref_mailto,
            session=session,
            timeout_seconds=settings.http_timeout_seconds,
            user_agent=settings.user_agent,
        ),
        zotero=ZoteroClient(
            server_url=settings.zotero_translation_server,
            session=session,
            timeout_seconds=settings.http_timeout_seconds,
        ),
        page_scanner=PageDoiScanner(
            session=session,
            timeout_seconds=settings.http_timeout_seconds,
            user_agent=f"Mozilla/5.0 (compatible; {settings.user_agent})",
        ),
    )
    guard = overrides.get("guard") or InMemoryOperationGuard(settings.translation_guard_ttl_seconds)
    fingerprints = overrides.get("fingerprints") or ContentFingerprints(
        settings.fingerprint_ttl_seconds
    )
    scheduler = overrides.get("scheduler") or ReactionScheduler()
    locales = LocaleTable(
        english_locale=settings.english_locale, chinese_locale=settings.chinese_locale
    )

    translation = TranslationOrchestrator(
        store,
        translator,
        guard,
        fingerprints,
        ttl_seconds=settings.translation_guard_ttl_seconds,
    )
    covers = CoverOrchestrator(
        store,
        media_store,
        renderer,
        guard,
        public_dir=settings.resolve_path(settings.public_dir),
        tmp_dir=settings.resolve_path(settings.tmp_dir),
        session=session,
        timeout=settings.http_timeout_seconds,
        max_redirects=settings.max_redirects,
        scale=settings.cover_render_scale,
        ttl_seconds=settings.cover_guard_ttl_seconds,
    )
    citations = CitationOrchestrator(
        store,
        resolver,
        guard,
        fingerprints,
        default_locale=settings.default_locale,
        ttl_seconds=settings.citation_guard_ttl_seconds,
    )
    slugs = SlugReconciler(store, guard, ttl_seconds=settings.slug_guard_ttl_seconds)
    dispatcher = ReactionDispatcher(
        store=store,
        scheduler=scheduler,
        guard=guard,
        fingerprints=fingerprints,
        locales=locales,
        translation=translation,
        covers=covers,
        citations=citations,
        slugs=slugs,
        default_locale=settings.default_locale,
    )
    logger.info(
        "Reaction engine assembled",
        extra={
            "event": "engine.built",
            "translation_enabled": translator.is_available,
            "chinese_locale": settings.chinese_locale,
        },
    )
    return ReactionEngine(
        settings=settings,
        store=store,
        media_store=media_store,
        translator=translator,
        renderer=renderer,
        resolver=resolver,
        guard=guard,
        fingerprints=fingerprints,
        scheduler=scheduler,
        dispatcher=dispatcher,
        translation=translation,
        covers=covers,
        citations=citations,
        slugs=slugs,
        session=session,
    )


__all__ = ["ReactionEngine", "build_engine"]
